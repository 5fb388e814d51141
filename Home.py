# contractor_dashboard/Home.py
import streamlit as st

st.set_page_config(
    page_title="FORZA",
    page_icon="🏗️",
    layout="wide"
)

TOTAL_SLIDES = 8
HERO_IMAGE = "https://images.pexels.com/photos/137586/pexels-photo-137586.jpeg?auto=compress&cs=tinysrgb&w=1260&h=750&dpr=2"

if 'current_slide' not in st.session_state:
    st.session_state.current_slide = 1


def previous_slide():
    current = st.session_state.current_slide
    st.session_state.current_slide = TOTAL_SLIDES if current == 1 else current - 1


def next_slide():
    current = st.session_state.current_slide
    st.session_state.current_slide = 1 if current == TOTAL_SLIDES else current + 1


# --- HEADER ---
nav, cta = st.columns([4, 1])
with nav:
    st.caption("PROYECTOS / CATÁLOGO / PANEL")
with cta:
    st.page_link("pages/1_📊_Panel.py", label="COMENZAR", icon="➡️")

st.markdown("---")

# --- MAIN CONTENT ---
left, right = st.columns(2)
with left:
    st.title("FORZA")
    st.write("""
Gestión integral para contratistas: seguimiento de obras, avance y bitácora de cada proyecto,
y acceso al catálogo completo de productos de nuestros proveedores.
""")
    st.write("""
Selecciona un módulo en la barra lateral para comenzar.
""")

    counter, prev_col, next_col = st.columns([3, 1, 1])
    counter.markdown(f"**{st.session_state.current_slide:02d} / {TOTAL_SLIDES:02d}**")
    prev_col.button("←", on_click=previous_slide, use_container_width=True)
    next_col.button("→", on_click=next_slide, use_container_width=True)

with right:
    st.image(HERO_IMAGE, caption="Detalle arquitectónico", use_container_width=True)

st.header("Módulos disponibles")
st.markdown("""
- **📊 Panel:** Proyectos activos, productos en catálogo, clientes y actividad reciente.
- **📦 Catálogo:** Búsqueda sobre el catálogo de productos, cargado por páginas.
- **🧰 Catálogo de Proveedor:** El mismo catálogo con SKU de proveedor, atributos, precios y stock.
- **🏗️ Proyectos:** Estado, avance y bitácora de cada obra.
""")
