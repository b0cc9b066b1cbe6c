import logging

import pandas as pd
import streamlit as st

from gpa_tracker.backend_logic import project_cgpa
from gpa_tracker.grade_scale import SCALE_TYPES, scale_letters
from gpa_tracker.io_csv import import_courses, parse_courses, read_csv_upload, validate_courses_csv
from gpa_tracker.reports import (
    dashboard_summary,
    gpa_trend,
    grade_distribution,
    projection_frame,
    semester_report,
)
from gpa_tracker.retakes import RETAKE_POLICIES
from gpa_tracker.snapshot import dumps_snapshot, loads_snapshot
from gpa_tracker.store import GradebookStore

logging.basicConfig(level=logging.INFO)

# ------------------------
# Streamlit UI
# ------------------------

st.set_page_config(
    page_title="GPA Tracker | Semester GPA, CGPA & Planner",
    page_icon="🎓",
    layout="wide",
)

if "store" not in st.session_state:
    st.session_state["store"] = GradebookStore()
store: GradebookStore = st.session_state["store"]

st.title("🎓 GPA Tracker")
st.write(
    "Record your semesters and course scores, follow your semester GPA and CGPA, "
    "and work out the average GPA you need to reach a target CGPA."
)

page = st.sidebar.radio("Go to", ["Dashboard", "Semesters", "Planner", "Settings"])


# ------------------------
# Dashboard
# ------------------------

def render_dashboard():
    summary = dashboard_summary(store)

    if summary["semester_count"] == 0:
        st.info("No semesters yet. Add your first semester under **Semesters** to get started.")
        return

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("CGPA", f"{summary['cgpa']:.2f}", help=f"out of {summary['max_gpa']:.1f}")
    with col2:
        st.metric("Latest semester GPA", f"{summary['latest_semester_gpa']:.2f}")
    with col3:
        st.metric("Total units", f"{summary['total_units']:g}")
    with col4:
        st.metric("Total quality points", f"{summary['total_quality_points']:.1f}")

    st.markdown("**Progress to target CGPA** "
                f"({summary['target_cgpa']:.2f})")
    st.progress(int(round(summary["target_progress"])))

    st.subheader("GPA trend")
    trend = gpa_trend(store.semesters, store.courses_by_semester, store.settings.retake_policy)
    st.line_chart(trend.set_index("semester"))

    st.subheader("Grade distribution")
    st.bar_chart(grade_distribution(store.aggregation_courses(), store.settings.grade_mapping))


# ------------------------
# Semesters and courses
# ------------------------

def render_semesters():
    with st.form("semester_form", clear_on_submit=True):
        st.subheader("Add a semester")
        c1, c2, c3 = st.columns(3)
        with c1:
            session = st.text_input("Session", placeholder="2023/2024")
        with c2:
            term = st.selectbox("Term", [1, 2, 3])
        with c3:
            level = st.number_input("Level", min_value=100, max_value=900, step=100, value=100)
        if st.form_submit_button("Add semester", type="primary"):
            result, _ = store.add_semester(session, int(term), int(level))
            if result.valid:
                st.success("Semester added")
            else:
                st.error(result.error)

    letters = scale_letters(store.settings.grade_mapping)

    for semester in store.semesters:
        courses = store.courses_for(semester.id)
        report = semester_report(semester, courses)

        with st.expander(f"{report['label']}: GPA {report['gpa']:.2f}", expanded=False):
            if courses:
                table = pd.DataFrame(
                    [{"Code": c.code, "Title": c.title or "", "Units": c.units,
                      "Score": c.score, "Grade": c.grade_letter, "Point": c.grade_point}
                     for c in courses]
                )
                st.dataframe(table, use_container_width=True, hide_index=True)
                st.caption(f"{report['units']:g} units, {report['quality_points']:.1f} quality points")
                for c in report["impactful_courses"]:
                    st.warning(f"{c.code} ({c.units} units, {c.grade_letter}) is pulling this GPA down.")
                st.bar_chart(grade_distribution(courses, store.settings.grade_mapping))
            else:
                st.write("No courses recorded yet.")

            with st.form(f"course_form_{semester.id}", clear_on_submit=True):
                f1, f2, f3 = st.columns(3)
                with f1:
                    code = st.text_input("Course code", key=f"code_{semester.id}")
                    title = st.text_input("Title (optional)", key=f"title_{semester.id}")
                with f2:
                    units = st.number_input("Units", min_value=0, max_value=30, value=3,
                                            key=f"units_{semester.id}")
                    mode = st.radio("Grade input", ["Score", "Letter grade"], horizontal=True,
                                    key=f"mode_{semester.id}")
                with f3:
                    score = st.number_input("Score", min_value=0.0, max_value=100.0, step=1.0,
                                            key=f"score_{semester.id}")
                    letter = st.selectbox("Letter", letters, key=f"letter_{semester.id}")

                if st.form_submit_button("Add course"):
                    if mode == "Score":
                        result, _ = store.add_course(semester.id, code, int(units),
                                                     score=float(score), title=title)
                    else:
                        result, _ = store.add_course(semester.id, code, int(units),
                                                     letter=letter, title=title)
                    if result.valid:
                        st.success("Course added")
                    else:
                        st.error(result.error)

            uploaded = st.file_uploader("Upload courses CSV (Code, Units, Score or Grade)",
                                        type=["csv"], key=f"csv_{semester.id}")
            if uploaded is not None and st.button("Import CSV", key=f"import_{semester.id}"):
                try:
                    rows = parse_courses(validate_courses_csv(read_csv_upload(uploaded)))
                except Exception as e:
                    st.error(f"CSV error: {e}")
                else:
                    rejected = import_courses(store, semester.id, rows)
                    st.success(f"Imported {len(rows) - len(rejected)} course(s)")
                    for entry, result in rejected:
                        st.error(f"{entry.get('code')}: {result.error}")

            if courses:
                to_delete = st.selectbox("Delete a course", [""] + [c.code for c in courses],
                                         key=f"del_course_{semester.id}")
                if to_delete and st.button("Delete course", key=f"del_course_btn_{semester.id}"):
                    target = next(c for c in courses if c.code == to_delete)
                    store.delete_course(semester.id, target.id)
                    st.rerun()

            if st.button("Delete semester", key=f"del_sem_{semester.id}"):
                store.delete_semester(semester.id)
                st.rerun()


# ------------------------
# Planner
# ------------------------

def render_planner():
    summary = dashboard_summary(store)
    max_gpa = summary["max_gpa"]

    col1, col2 = st.columns(2)
    with col1:
        st.metric("Current CGPA", f"{summary['cgpa']:.2f}")
    with col2:
        st.metric("Total units", f"{summary['total_units']:g}")

    st.subheader("Planning inputs")
    target = st.number_input("Target CGPA", min_value=0.0, max_value=float(max_gpa),
                             step=0.1, value=float(min(store.settings.target_cgpa, max_gpa)))
    if st.button("Save target"):
        store.update_settings(target_cgpa=target)
        st.success("Target CGPA updated")

    remaining = st.slider("Remaining semesters", min_value=1, max_value=10, value=4)
    units_per_sem = st.slider("Units per semester", min_value=3, max_value=30, value=15)

    what_if = None
    if st.toggle("What-if: set next semester's GPA"):
        what_if = st.slider("Next semester GPA", min_value=0.0, max_value=float(max_gpa),
                            step=0.05, value=float(min(3.5, max_gpa)))

    projection = project_cgpa(
        current_cgpa=summary["cgpa"],
        units_completed=summary["total_units"],
        target_cgpa=target,
        remaining_semesters=remaining,
        units_per_semester=units_per_sem,
        max_gpa=max_gpa,
        what_if_gpa=what_if,
    )

    st.markdown("### Required average GPA")
    if projection["achievable"]:
        st.metric("Per remaining semester", f"{projection['required_gpa']:.2f}")
    else:
        st.error(
            f"❌ A target of {target:.2f} is **not achievable** with {remaining} semester(s) "
            f"of {units_per_sem} units: it would need {projection['required_gpa']:.2f} "
            f"on a {max_gpa:.1f} scale."
        )

    st.line_chart(projection_frame(projection)[["projected_gpa", "required_gpa", "target_gpa"]])

    final = projection["final_cgpa"]
    shown = min(final, max_gpa)
    if projection["achieves_target"]:
        st.success(f"✅ This plan finishes on a projected CGPA of **{shown:.2f}**.")
    else:
        st.warning(f"This plan finishes on a projected CGPA of **{shown:.2f}**, below your target.")


# ------------------------
# Settings
# ------------------------

def render_settings():
    settings = store.settings

    st.subheader("Grade scale")
    scale_type = st.radio("Scale", list(SCALE_TYPES), index=list(SCALE_TYPES).index(settings.scale_type),
                          horizontal=True)
    recalc = st.checkbox("Recalculate grades of existing courses")
    if st.button("Save grade scale"):
        store.update_settings(scale_type=scale_type)
        if recalc:
            changed = store.recalculate_all()
            st.info(f"{changed} course(s) regraded")
        st.success("Grade scale updated")

    st.dataframe(
        pd.DataFrame(
            [{"Letter": g.letter, "Min score": g.min_score, "Max score": g.max_score, "Point": g.point}
             for g in store.settings.grade_mapping]
        ),
        hide_index=True,
    )

    st.subheader("Retake policy")
    policy = st.radio(
        "When a course is retaken",
        list(RETAKE_POLICIES),
        index=list(RETAKE_POLICIES).index(settings.retake_policy),
        format_func=lambda p: "Count only the latest attempt" if p == "replace" else "Count every attempt",
    )
    if st.button("Save retake policy"):
        store.update_settings(retake_policy=policy)
        st.success("Retake policy updated")

    st.subheader("Export / import")
    st.download_button(
        "Download data (JSON)",
        data=dumps_snapshot(store),
        file_name="gpa-tracker-export.json",
        mime="application/json",
    )
    uploaded = st.file_uploader("Import a previous export", type=["json"])
    if uploaded is not None and st.button("Replace my data with this file"):
        try:
            st.session_state["store"] = loads_snapshot(uploaded.getvalue().decode("utf-8"))
        except ValueError as e:
            st.error(str(e))
        else:
            st.success("Data imported")
            st.rerun()


if page == "Dashboard":
    render_dashboard()
elif page == "Semesters":
    render_semesters()
elif page == "Planner":
    render_planner()
else:
    render_settings()
