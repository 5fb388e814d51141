# contractor_dashboard/utils/catalog_view.py
import streamlit as st
import pandas as pd

from services.catalog_sync import SyncStatus
from utils.config_loader import APP_CONFIG
from utils.data_loader import config_error, get_catalog_session

PLACEHOLDER_IMAGE = "https://images.pexels.com/photos/162553/keys-workshop-mechanic-tools-162553.jpeg"


def products_to_dataframe(products, field_config):
    placeholder = APP_CONFIG.get('catalog', {}).get('placeholder_image') or PLACEHOLDER_IMAGE
    rows = []
    for product in products:
        row = {
            "Imagen": product.main_image or placeholder,
            "SKU": product.sku,
            "Nombre": product.name,
            "Categoría": product.category,
            "Fotos": len(product.image_urls),
        }
        if field_config.parse_supplier_sku:
            row["SKU Proveedor"] = product.supplier_sku
        if field_config.parse_attributes:
            row["Atributos"] = ", ".join(product.attributes)
        if field_config.parse_list_price:
            row["Precio Lista"] = product.list_price
        if field_config.parse_stock:
            row["Stock"] = product.stock
        rows.append(row)
    return pd.DataFrame(rows)


def render_image_gallery(products, key):
    with_gallery = [p for p in products if len(p.image_urls) > 1]
    if not with_gallery:
        return
    with st.expander(f"🖼️ Ver imágenes ({len(with_gallery)} productos con varias fotos)"):
        selected = st.selectbox(
            "Producto",
            options=with_gallery,
            format_func=lambda p: f"{p.sku} - {p.name}",
            index=None,
            placeholder="Elige un producto...",
            key=f"{key}_gallery",
        )
        if selected is not None:
            st.subheader(selected.name)
            st.image(list(selected.image_urls), width=180)


def render_catalog_page(title, field_config, session_key, search_placeholder="Buscar productos..."):
    if config_error():
        st.error(f"Configuration Error: {config_error()}")
        st.stop()

    try:
        session = get_catalog_session(session_key, field_config)
    except ValueError as e:
        st.error(f"Catalog configuration is incomplete: {e}")
        st.stop()

    # --- INITIAL LOAD ---
    if session.status == SyncStatus.IDLE:
        with st.spinner("Cargando productos..."):
            session.reload()

    # --- HEADER AND REFRESH BUTTON ---
    col1, col2 = st.columns([3, 1])
    with col1:
        st.title(title)
        st.markdown(f"Total de productos: **{session.total_count:,}**")
    with col2:
        if st.button("🔄 Recargar catálogo", disabled=session.loading, key=f"{session_key}_reload"):
            with st.spinner("Recargando productos..."):
                session.reload()
            st.rerun()

    if session.error:
        st.error(session.error)

    # --- SEARCH ---
    search_term = st.text_input("Buscar", placeholder=search_placeholder, key=f"{session_key}_search", label_visibility="collapsed")
    session.set_query(search_term)
    filtered = session.filtered_items

    # --- PRODUCTS TABLE ---
    if session.items:
        column_config = {
            "Imagen": st.column_config.ImageColumn("Imagen", width="small"),
            "Precio Lista": st.column_config.NumberColumn("Precio Lista", format="$%.2f"),
            "Stock": st.column_config.NumberColumn("Stock", format="%d"),
        }
        st.dataframe(
            products_to_dataframe(filtered, field_config),
            column_config=column_config,
            use_container_width=True,
            hide_index=True,
        )
        st.info(f"Mostrando {len(filtered):,} de {len(session.items):,} productos cargados ({session.total_count:,} en total).")
        render_image_gallery(filtered, session_key)
    elif session.status == SyncStatus.READY:
        st.warning("El catálogo no tiene productos.")

    # --- LOAD MORE ---
    if session.has_more and session.status != SyncStatus.IDLE:
        if st.button("⬇️ Cargar más productos", disabled=session.loading, key=f"{session_key}_more"):
            with st.spinner("Cargando más productos..."):
                session.load_more()
            st.rerun()
