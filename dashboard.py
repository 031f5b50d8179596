import pandas as pd
import streamlit as st

from core.batch import BATCH_SIZES, scale_batch
from core.context import (
    CONCENTRATIONS, DEFAULT_CONCENTRATION, DEFAULT_INTENSITY, DEFAULT_OCCASION,
    INTENSITIES, OCCASIONS,
)
from core.formula import FormulaEngine
from core.ingredients import get_default_database
from core.workflow import FormulaInputError, create_custom_scent
from infra.database import get_db_engine, get_session_factory
from infra.models import VERSION_STATUSES
from infra.store import FormulaStore

st.set_page_config(
    page_title="Scent Formula Lab",
    page_icon="🧪",
    layout="wide"
)

st.markdown("""
<style>
    .ingredient-tag {
        display: inline-block;
        background-color: #f3e5f5;
        color: #6a1b9a;
        padding: 5px 10px;
        margin: 2px;
        border-radius: 15px;
        font-size: 0.9em;
    }
</style>
""", unsafe_allow_html=True)

# =========================================================
# 1. RESOURCE CACHE
# =========================================================
@st.cache_resource
def load_engine():
    print("🔄 [SYSTEM] Loading ingredient database...")
    return FormulaEngine(get_default_database())


@st.cache_resource
def load_session_factory():
    return get_session_factory(get_db_engine())


try:
    engine = load_engine()
except ValueError as e:
    st.error(f"Failed to load the ingredient database: {e}")
    st.stop()

# =========================================================
# 2. SESSION STATE
# =========================================================
if 'outcome' not in st.session_state:
    st.session_state.outcome = None

# one Session per browser session, reused across reruns
if 'store' not in st.session_state:
    st.session_state.store = FormulaStore(load_session_factory()())
store = st.session_state.store

# =========================================================
# 3. SIDEBAR
# =========================================================
families = sorted(engine.db.families)

with st.sidebar:
    st.header("🎛️ Brief")
    dominant = st.selectbox("Dominant family", families, index=families.index("oriental") if "oriental" in families else 0)
    secondary = st.selectbox("Secondary family", families, index=families.index("woody") if "woody" in families else 0)
    accent = st.selectbox("Accent family", families, index=families.index("spicy") if "spicy" in families else 0)
    scent_code = st.text_input("Scent code", value="OWS-001")
    scent_name = st.text_input("Scent name (optional)") or None

    st.divider()
    concentration = st.selectbox("Concentration", CONCENTRATIONS, index=CONCENTRATIONS.index(DEFAULT_CONCENTRATION))
    occasion = st.selectbox("Occasion", OCCASIONS, index=OCCASIONS.index(DEFAULT_OCCASION))
    intensity = st.selectbox("Intensity", INTENSITIES, index=INTENSITIES.index(DEFAULT_INTENSITY))
    batch_label = st.selectbox("Batch size", list(BATCH_SIZES), index=list(BATCH_SIZES).index("standard"))
    save = st.checkbox("Save version", value=True)

    if st.button("⚗️ Generate formula", type="primary", use_container_width=True):
        try:
            st.session_state.outcome = create_custom_scent(
                dominant, secondary, accent, scent_code,
                scent_name=scent_name,
                concentration=concentration,
                occasion=occasion,
                intensity=intensity,
                batch_size_ml=BATCH_SIZES[batch_label],
                save=save,
                store=store,
                engine=engine,
            )
        except FormulaInputError as e:
            st.error(str(e))

# =========================================================
# 4. MAIN AREA
# =========================================================
st.title("🧪 Scent Formula Lab")

outcome = st.session_state.outcome
if outcome is None:
    st.info("Choose three families and a scent code, then generate a formula.")
else:
    result = outcome.result
    card = outcome.scent_card

    col1, col2 = st.columns([2, 1])

    with col1:
        st.subheader(card.headline)
        c1, c2, c3 = st.columns(3)
        c1.metric("Ingredients", result.ingredient_count)
        c2.metric("Hero", result.hero or "-")
        c3.metric("Steeping", result.steeping.label)

        rows = [
            {"Family": family, "Layer": layer, "Ingredient": item.name,
             "Percent": item.percent, "Supplier": item.supplier}
            for family, layer, item in result.entries()
        ]
        st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)

        for warning in result.ifra_warnings:
            st.warning(f"IFRA: {warning}")
        with st.expander("📝 Perfumer notes", expanded=bool(result.perfumer_notes)):
            for note in result.perfumer_notes:
                st.markdown(f"- {note}")

    with col2:
        st.markdown("### 📖 Scent card")
        st.write(card.story)
        for stage, text in card.scent_journey.items():
            st.markdown(f"**{stage.capitalize()}:** {text}")
        st.caption(card.how_to_wear["longevity_note"])
        st.caption(outcome.experience.projection)

    st.divider()

    st.subheader("📦 Batch sheet")
    size = st.number_input("Scale to (ml)", min_value=1.0, value=float(outcome.batch_sheet.batch_size_ml))
    sheet = outcome.batch_sheet if size == outcome.batch_sheet.batch_size_ml else scale_batch(outcome.batch_sheet, size)
    st.dataframe(sheet.lines_frame(), hide_index=True, use_container_width=True)
    for note in sheet.production_notes:
        st.markdown(f"- {note}")

# =========================================================
# 5. SAVED FORMULAS
# =========================================================
st.divider()
st.subheader("💾 Saved formulas")

records = store.list_formulas()
if records:
    st.dataframe(
        pd.DataFrame([
            {"Code": r.scent_code, "Name": r.scent_name, "Versions": r.current_version,
             "Status": r.versions[-1].status if r.versions else "-", "Updated": r.updated_at}
            for r in records
        ]),
        hide_index=True,
        use_container_width=True
    )

    code = st.selectbox("Formula", [r.scent_code for r in records])
    latest = store.get_formula_version(code)
    status = st.selectbox("Status", VERSION_STATUSES, index=VERSION_STATUSES.index(latest.status))
    if st.button("Update status") and status != latest.status:
        store.update_formula_status(code, latest.version, status)
        st.toast(f"{latest.id} marked as {status}")
        st.rerun()
else:
    st.caption("No formulas saved yet.")
