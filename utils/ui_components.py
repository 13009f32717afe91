"""Shared UI components: chapter headers, callout boxes, quizzes, navigation."""
import streamlit as st

from utils.constants import PAGE_TITLES

PAGE_FILES = {
    1: "01_Lasso_Regression.py",
    2: "02_KMeans_Clustering.py",
    3: "03_Trajectory_Clustering.py",
    4: "04_Listings_Dashboard.py",
}


def chapter_header(number, subtitle=None):
    """Render the chapter title (and an optional one-line subtitle)."""
    st.title(f"Chapter {number}: {PAGE_TITLES[number]}")
    if subtitle:
        st.caption(subtitle)
    st.divider()


def concept_box(title, content, accent="#2E86C1"):
    """Render a highlighted concept/theory box."""
    st.markdown(f"""
<div style="background-color: #EBF5FB; padding: 20px; border-radius: 10px; border-left: 5px solid {accent}; margin: 10px 0;">
<h4 style="color: {accent}; margin-top: 0;">{title}</h4>
<p style="color: #1B4F72;">{content}</p>
</div>
""", unsafe_allow_html=True)


def formula_box(title, formula, explanation=""):
    st.markdown(f"**{title}**")
    st.latex(formula)
    if explanation:
        st.caption(explanation)


def insight_box(text):
    st.info(f"**Key Insight:** {text}")


def warning_box(text):
    st.warning(f"**Common Mistake:** {text}")


def analysis_error(exc):
    """Show an analysis failure in place of the results it prevented."""
    st.error(f"**{type(exc).__name__}:** {exc}")


def code_example(code, language="python"):
    """Render a collapsible code example."""
    with st.expander("Show Code"):
        st.code(code, language=language)


def quiz(question, options, correct_idx, explanation="", key="quiz"):
    """Render a multiple-choice question. Returns True/False once answered, else None."""
    st.subheader("Quick Quiz")
    answer = st.radio(question, options, key=key, index=None)
    if answer is None:
        return None
    correct = options.index(answer) == correct_idx
    if correct:
        st.success("Correct!")
    else:
        st.error(f"Not quite. The correct answer is: **{options[correct_idx]}**")
    if explanation:
        st.caption(explanation)
    return correct


def takeaways(points):
    st.subheader("Key Takeaways")
    for p in points:
        st.markdown(f"- {p}")


def navigation(current):
    """Prev/next links to the neighbouring chapters."""
    col1, _, col3 = st.columns([1, 2, 1])
    prev_n, next_n = current - 1, current + 1
    with col1:
        if prev_n in PAGE_FILES:
            st.page_link(f"pages/{PAGE_FILES[prev_n]}", label=f"← Ch {prev_n}: {PAGE_TITLES[prev_n]}")
    with col3:
        if next_n in PAGE_FILES:
            st.page_link(f"pages/{PAGE_FILES[next_n]}", label=f"Ch {next_n}: {PAGE_TITLES[next_n]} →")
