import streamlit as st

from cli import SAMPLE_BUYERS, SAMPLE_SUPPLIERS
from config import get_settings
from table_engine import Table, attempt, join, project, render, select
from table_io import parse_text

st.set_page_config(page_title="Mini-Table: select / project / join", page_icon="🧮", layout="wide")

settings = get_settings()

if "left_text" not in st.session_state:
    st.session_state.left_text = SAMPLE_BUYERS
if "right_text" not in st.session_state:
    st.session_state.right_text = SAMPLE_SUPPLIERS

st.title("🧮 Mini-Table — relational operators on delimited text")
st.write(
    "Paste two tables (first line is the header), pick the operators, then **Run**. "
    "Everything is text: selection compares cells with exact string equality."
)

# Inputs
col1, col2 = st.columns([1, 1], gap="large")

with col1:
    st.subheader("Left table")
    st.text_area("Left table text", height=220, key="left_text")

with col2:
    st.subheader("Right table")
    st.text_area("Right table text (leave empty to skip the join)", height=220, key="right_text")

delimiter = st.text_input("Delimiter", value=settings.delimiter, max_chars=1) or settings.delimiter


def show_error(error) -> None:
    st.error(f"{error.kind.value}: {error}")


left_result = attempt(parse_text, st.session_state.left_text, delimiter)
right_result = attempt(parse_text, st.session_state.right_text, delimiter)

# Visualize input tables
st.subheader("👀 Input tables")
for label, outcome in (("Left", left_result), ("Right", right_result)):
    if not outcome.ok:
        show_error(outcome.error)
        continue
    table = outcome.table
    st.markdown(f"**{label}** — columns: {list(table.columns)}  \n_rows: {len(table)}_")
    st.table(table.to_records() or [])

# Operators
st.subheader("Operators")
left_cols = list(left_result.table.columns) if left_result.ok else []
right_cols = list(right_result.table.columns) if right_result.ok else []
shared = [c for c in left_cols if c in right_cols]

o1, o2, o3 = st.columns(3)
with o1:
    join_col = st.selectbox("Join on", ["(no join)"] + shared)
with o2:
    select_col = st.text_input("Select column", help="Leave empty to keep every row.")
    select_val = st.text_input("equals value")
with o3:
    project_cols = st.text_input("Project columns", help="Comma separated; empty keeps all columns.")


def run_pipeline(left: Table, right: Table) -> Table:
    result = left
    if join_col != "(no join)":
        result = join(result, right, join_col)
    if select_col.strip():
        result = select(result, select_col.strip(), select_val)
    names = [c.strip() for c in project_cols.split(",") if c.strip()]
    if names:
        result = project(result, names)
    return result


# Run
if st.button("▶️ Run", type="primary"):
    if not (left_result.ok and right_result.ok):
        st.warning("Fix the input tables first.")
    else:
        outcome = attempt(run_pipeline, left_result.table, right_result.table)
        if not outcome.ok:
            show_error(outcome.error)
        else:
            result = outcome.table
            st.success("Done!")
            tabs = st.tabs(["Result Table", "Result Text", "Aligned Text"])
            with tabs[0]:
                if result.rows:
                    st.table(result.to_records())
                    st.download_button(
                        "Download CSV", data=result.to_csv(delimiter), file_name="result.csv", mime="text/csv"
                    )
                else:
                    st.info("Empty result set.")
            with tabs[1]:
                st.code(result.pretty(), language="text")
            with tabs[2]:
                st.code(render(result, settings.column_width), language="text")
else:
    st.info("Edit the tables, choose operators, then click **Run**.")
