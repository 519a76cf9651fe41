"""
Streamlit UI for the Canopy Calculator.

Features:
- Obstacle, tree type, service and circumference form
- Live project summary with quick stats
- Price estimate modal with project details and resolution trace
"""
import streamlit as st
import pandas as pd
import sys
import time
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from canopy_calculator.engine import CanopyEstimator, UnpriceableRequestError
from canopy_calculator.config.settings import get_settings
from canopy_calculator.services.intake_service import (
    FormSubmission,
    toggle_obstacle,
    missing_required_fields,
    build_price_request,
    summarize_form,
    format_price,
    REQUIRED_FIELDS_MESSAGE,
    TREE_TYPE_DESCRIPTIONS,
    SERVICE_TYPE_DESCRIPTIONS,
    ESTIMATE_INCLUDES,
    ESTIMATE_DISCLAIMER,
)


st.set_page_config(
    page_title="Your Canopy Calculator",
    layout="wide",
)


@st.cache_resource
def get_estimator():
    """Get cached estimator instance."""
    return CanopyEstimator()


try:
    estimator = get_estimator()
    settings = get_settings()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()


TREE_ICONS = {'leafy': '🍃', 'pokey': '🌲'}
SERVICE_ICONS = {'tree trim': '🌳', 'remove stump': '🪓', 'both': '🌳🪓'}

FORM_KEYS = ('obstacles', 'tree_type', 'service_type', 'circumference')


# ============================================================================
# SESSION STATE
# ============================================================================
if 'obstacles' not in st.session_state:
    st.session_state.obstacles = []
if 'estimate' not in st.session_state:
    st.session_state.estimate = None


def _toggle(obstacle: str):
    st.session_state.obstacles = toggle_obstacle(st.session_state.obstacles, obstacle)


def _reset_form():
    """Discard every selection and the last estimate."""
    for key in FORM_KEYS:
        st.session_state.pop(key, None)
    for obstacle in settings.obstacle_options:
        st.session_state.pop(f"obstacle_{obstacle}", None)
    st.session_state.obstacles = []
    st.session_state.estimate = None


def _close_estimate():
    st.session_state.estimate = None


def current_form() -> FormSubmission:
    return FormSubmission(
        obstacles=list(st.session_state.obstacles),
        tree_type=st.session_state.get('tree_type') or '',
        service_type=st.session_state.get('service_type') or '',
        circumference=st.session_state.get('circumference') or '',
    )


# ============================================================================
# PRICE ESTIMATE MODAL
# ============================================================================
@st.dialog("💰 Price Estimate")
def show_estimate(form: FormSubmission):
    result = st.session_state.estimate

    st.markdown(f"<h2 style='text-align:center'>{format_price(result.price)}</h2>", unsafe_allow_html=True)
    st.caption("Estimated Total Cost")

    if not result.priced:
        st.warning("We couldn't price this tree from our table. Check the circumference or call us for a quote.")

    st.markdown("**Project Details:**")
    details = pd.DataFrame([
        {'Item': 'Tree Type', 'Value': form.tree_type},
        {'Item': 'Service', 'Value': form.service_type},
        {'Item': 'Circumference', 'Value': f"{form.circumference} inches"},
        {'Item': 'Obstacles', 'Value': f"{len(form.obstacles)} selected"},
    ])
    st.dataframe(details, hide_index=True, use_container_width=True)

    if result.lines:
        with st.expander("📊 Price Breakdown"):
            st.dataframe(pd.DataFrame(result.to_dict()['Lines']), hide_index=True, use_container_width=True)

    with st.container(border=True):
        st.markdown("**What's Included:**")
        for item in ESTIMATE_INCLUDES:
            st.caption(f"✓ {item}")

    with st.expander("🔍 Resolution Details"):
        for t in result.trace:
            if t.value:
                st.caption(f"**{t.step}**: {t.description} = `{t.value}`")
            else:
                st.caption(f"**{t.step}**: {t.description}")
        for warning in result.warnings:
            st.warning(warning)

    st.caption(ESTIMATE_DISCLAIMER)

    c1, c2 = st.columns(2)
    with c1:
        if st.button("🔄 Start Over", use_container_width=True, on_click=_reset_form):
            st.rerun()
    with c2:
        if st.button("Close", type="primary", use_container_width=True, on_click=_close_estimate):
            st.rerun()


# ============================================================================
# HEADER
# ============================================================================
st.title("Your Canopy Calculator")
st.caption("Get a ballpark estimate for your tree services. Fill out the form below to receive a detailed quote.")

col1, col2 = st.columns([2, 1], gap="large")


# ============================================================================
# MAIN FORM
# ============================================================================
with col1:
    with st.container(border=True):
        st.subheader("⚠️ Obstacles Near Tree")
        st.caption("Select all obstacles that are near the tree:")
        obstacle_cols = st.columns(len(settings.obstacle_options))
        for column, obstacle in zip(obstacle_cols, settings.obstacle_options):
            with column:
                st.checkbox(
                    obstacle.capitalize(),
                    value=obstacle in st.session_state.obstacles,
                    key=f"obstacle_{obstacle}",
                    on_change=_toggle,
                    args=(obstacle,),
                )

        st.subheader("🌳 Tree Type")
        st.radio(
            "Tree Type",
            options=list(settings.tree_type_options),
            index=None,
            key='tree_type',
            format_func=lambda t: f"{TREE_ICONS.get(t, '')} {t.capitalize()} ({TREE_TYPE_DESCRIPTIONS.get(t, '')})",
            horizontal=True,
            label_visibility="collapsed",
        )

        st.subheader("🔧 Removal")
        st.radio(
            "Service Type",
            options=list(settings.service_type_options),
            index=None,
            key='service_type',
            format_func=lambda s: f"{SERVICE_ICONS.get(s, '')} {s.capitalize()} ({SERVICE_TYPE_DESCRIPTIONS.get(s, '')})",
            horizontal=True,
            label_visibility="collapsed",
        )

        st.subheader("📏 Tree Circumference")
        st.text_input(
            "Circumference (inches)",
            key='circumference',
            placeholder="Enter tree circumference",
        )
        st.caption("Measure around the trunk at chest height")

        if st.button("Calculate Price Estimate", type="primary", use_container_width=True):
            form = current_form()
            if missing_required_fields(form):
                st.error(REQUIRED_FIELDS_MESSAGE)
            else:
                request = build_price_request(form)
                try:
                    with st.spinner("Calculating Price..."):
                        # Simulated round trip
                        time.sleep(settings.submit_delay_seconds)
                        st.session_state.estimate = estimator.estimate(request)
                except UnpriceableRequestError as e:
                    st.error(str(e))


# ============================================================================
# PROJECT SUMMARY
# ============================================================================
with col2:
    with st.container(border=True):
        st.subheader("📋 Project Summary")
        form = current_form()

        if form.is_empty():
            st.info("📝 Fill out the form to see your project summary here")
        else:
            if form.obstacles:
                st.markdown("**⚠️ Obstacles:** " + ", ".join(o.capitalize() for o in form.obstacles))
            if form.tree_type:
                st.markdown(f"**🌳 Tree Type:** {TREE_ICONS.get(form.tree_type, '')} {form.tree_type.capitalize()}")
            if form.service_type:
                st.markdown(f"**🔧 Service:** {SERVICE_ICONS.get(form.service_type, '')} {form.service_type.capitalize()}")
            if str(form.circumference).strip():
                st.markdown(f"**📏 Circumference:** {form.circumference} inches")

            st.divider()
            st.markdown("##### Quick Stats")
            stats = summarize_form(form)
            st.dataframe(
                pd.DataFrame([{'Stat': k, 'Value': str(v)} for k, v in stats.items()]),
                hide_index=True,
                use_container_width=True,
            )


if st.session_state.estimate is not None:
    show_estimate(current_form())
