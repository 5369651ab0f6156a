import logging

import streamlit as st

from kmap_solver import (
    FormType,
    matrix_from_minterms,
    reference_solution,
    solve,
    verify_solution,
)
from kmap_solver.render import draw_kmap

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

# ------------------------------- إعداد الواجهة -------------------------------

st.set_page_config(page_title="K-Map Minimizer", layout="wide")
st.title("🧮 K-Map Minimizer")
st.markdown("---")

n = st.number_input("عدد المتغيرات:", min_value=2, max_value=4, value=4, step=1)
form = st.radio("شكل الناتج:", [FormType.SOP.value, FormType.POS.value], horizontal=True)
raw_mins = st.text_input("أدخل أرقام الـ minterms (مثال: 1,3,5,7):")
raw_dcs = st.text_input("أدخل أرقام don't care (اختياري):")


def _parse_indices(raw: str):
    try:
        return sorted({int(x.strip()) for x in raw.split(",") if x.strip()})
    except ValueError as exc:
        raise ValueError("استخدم أرقامًا صحيحة مفصولة بفواصل.") from exc


@st.cache_data
def cached_solve(nvars: int, mins: tuple, dcs: tuple, form_name: str):
    matrix = matrix_from_minterms(nvars, mins, dcs)
    return matrix, solve(matrix, nvars, form_name)


# ------------------------------- عند الضغط على الزر -------------------------------
if st.button("حل الخريطة 🚀"):
    try:
        mins = _parse_indices(raw_mins)
        dcs = _parse_indices(raw_dcs)
        matrix, solution = cached_solve(int(n), tuple(mins), tuple(dcs), form)
        _, ref_text, ref_cost = reference_solution(matrix, form)

        st.success(f"**{form}:**  \nF = {solution.expression}")
        st.info(f"**SymPy ({form}):**  \nF = {ref_text}")

        mismatches = verify_solution(matrix, solution)
        steps = (
            f"• عدد المتغيرات: {n}\n"
            f"• minterms = {mins}\n"
            f"• don't cares = {dcs if dcs else '—'}\n"
            f"• عدد المجموعات: {len(solution.groups)}\n"
            f"• تكلفة الحروف (literal cost): {solution.literal_cost} (SymPy: {ref_cost})\n"
            f"• التحقق: {'✔' if not mismatches else mismatches}"
        )
        st.text_area("تفاصيل الحساب:", steps, height=180)

        with st.container():
            st.markdown("### 🗺️ خريطة كارنوف (K-Map)")
            st.caption("المجموعات ملوّنة حسب ترتيب اختيارها")
            st.pyplot(draw_kmap(matrix, solution))

    except ValueError as e:
        st.error(f"حدث خطأ أثناء الحساب:\n{e}")
