# catalog/admin.py

import streamlit as st
import json
import pandas as pd
from typing import Any, Dict, List, Optional

from catalog.client import ProductApiClient
from catalog.config import load_settings
from catalog.exceptions import CatalogError, NotFoundError, ValidationError
from catalog.logger import configure_logging, get_logger
from catalog.models import Product

settings = load_settings()
configure_logging(settings)

# Create logger object
log = get_logger(__name__)
log.info("Streamlit admin is starting...")

TABLE_COLUMNS = ["name", "price", "currency", "stock", "category", "updatedAt", "id"]


@st.cache_resource
def get_client() -> ProductApiClient:
	return ProductApiClient(settings=settings)


def main():
	# Page settings
	st.set_page_config(
	page_title="Product Catalog Admin",
	page_icon="📦",
	layout="wide"
	)

	st.title("Product Catalog Admin")

	initialize_sessions()

	with st.sidebar:
		st.caption(f"API: {settings.api_url}")
		if st.button("Refresh", type="primary"):
			load_products()

	if st.session_state.products is None:
		load_products()

	col_list, col_form = st.columns([2, 1])

	with col_list:
		run_product_list()

	with col_form:
		if st.session_state.editing_id:
			run_edit_form()
		else:
			run_create_form()


def load_products():
	"""Fetch all products from the API into session state."""
	try:
		st.session_state.products = get_client().list_products()
		st.session_state.error = None
		log.info(f"Loaded {len(st.session_state.products)} products from API")
	except CatalogError as e:
		st.session_state.products = []
		st.session_state.error = f"Failed to load products: {e}"
		log.error(f"Failed to load products: {e}")


def run_product_list():
	"""Products table with edit, delete and download actions."""
	st.header("Products")

	if st.session_state.error:
		st.error(st.session_state.error)

	products: List[Product] = st.session_state.products or []
	if not products:
		st.info("No products yet. Use the form to add one.")
		return

	st.dataframe(products_frame(products), hide_index=True, use_container_width=True)

	options = {f"{p.name} ({p.id[:8]})": p.id for p in products}
	selected = st.selectbox("Select product", list(options.keys()), key="selected_label")
	selected_id = options.get(selected)

	col1, col2 = st.columns([1, 1])
	with col1:
		if st.button("Edit", disabled=selected_id is None):
			st.session_state.editing_id = selected_id
			st.rerun()
	with col2:
		confirm = st.checkbox("Confirm delete", key="confirm_delete")
		if st.button("Delete", disabled=not (selected_id and confirm)):
			delete_product(selected_id)

	with st.container():
		col1, col2 = st.columns([1, 1])
		with col1:
			download_datas(products, "json")
		with col2:
			download_datas(products, "csv")


def run_create_form():
	st.header("Add Product")
	with st.form("create_product", clear_on_submit=True):
		values = product_form_fields(None)
		submitted = st.form_submit_button("Create Product", type="primary")

	if submitted:
		log.info(f"Create submitted. Name: '{values['name']}'")
		try:
			product = get_client().create_product(serialize_draft(values))
			st.success(f"Created '{product.name}'")
			load_products()
			st.rerun()
		except ValidationError as e:
			show_validation_error(e)
		except CatalogError as e:
			st.error(f"Create failed: {e}")
			log.error(f"Create failed: {e}")


def run_edit_form():
	product = find_product(st.session_state.editing_id)
	if product is None:
		st.session_state.editing_id = None
		st.warning("Product no longer exists.")
		return

	st.header("Edit Product")
	with st.form("edit_product"):
		values = product_form_fields(product)
		col1, col2 = st.columns([1, 1])
		with col1:
			submitted = st.form_submit_button("Update Product", type="primary")
		with col2:
			cancelled = st.form_submit_button("Cancel")

	if cancelled:
		st.session_state.editing_id = None
		st.rerun()

	if submitted:
		patch = changed_fields(product, serialize_draft(values))
		log.info(f"Update submitted for id={product.id}, fields={sorted(patch)}")
		if not patch:
			st.info("Nothing changed.")
			return
		try:
			get_client().update_product(product.id, patch)
			st.session_state.editing_id = None
			load_products()
			st.rerun()
		except ValidationError as e:
			show_validation_error(e)
		except NotFoundError:
			st.session_state.editing_id = None
			st.warning("Product was deleted meanwhile.")
			load_products()
		except CatalogError as e:
			st.error(f"Update failed: {e}")
			log.error(f"Update failed for id={product.id}: {e}")


def product_form_fields(product: Optional[Product]) -> Dict[str, Any]:
	"""Render form inputs, prefilled from product when editing."""
	return {
		"name": st.text_input("Name", value=product.name if product else "", max_chars=100),
		"description": st.text_area("Description", value=product.description if product else "", max_chars=500),
		"price": st.number_input("Price", min_value=0.0, step=0.01, value=float(product.price) if product else 0.0),
		"currency": st.text_input("Currency", value=product.currency if product else "USD", max_chars=3),
		"stock": st.number_input("Stock", min_value=0, step=1, value=int(product.stock) if product else 0),
		"category": st.text_input("Category", value=(product.category or "") if product else "", max_chars=50),
		"imageUrl": st.text_input("Image URL", value=(product.image_url or "") if product else ""),
	}


def serialize_draft(values: Dict[str, Any]) -> Dict[str, Any]:
	"""Form values -> API payload. Blank optional text fields become null."""
	return {
		"name": values["name"].strip(),
		"description": values["description"],
		"price": float(values["price"]),
		"currency": values["currency"].strip().upper(),
		"stock": int(values["stock"]),
		"category": values["category"].strip() or None,
		"imageUrl": values["imageUrl"].strip() or None,
	}


def changed_fields(product: Product, payload: Dict[str, Any]) -> Dict[str, Any]:
	"""Keep only payload entries that differ from the stored product."""
	current = product.to_json()
	return {key: value for key, value in payload.items() if current.get(key) != value}


def delete_product(product_id: str):
	try:
		get_client().delete_product(product_id)
		log.info(f"Deleted product id={product_id}")
		if st.session_state.editing_id == product_id:
			st.session_state.editing_id = None
	except NotFoundError:
		st.warning("Product was already deleted.")
	except CatalogError as e:
		st.error(f"Delete failed: {e}")
		log.error(f"Delete failed for id={product_id}: {e}")
		return
	load_products()
	st.rerun()


def find_product(product_id: str) -> Optional[Product]:
	for product in st.session_state.products or []:
		if product.id == product_id:
			return product
	return None


def products_frame(products: List[Product]) -> pd.DataFrame:
	frame = pd.DataFrame([p.to_json() for p in products])
	return frame[[c for c in TABLE_COLUMNS if c in frame.columns]]


def show_validation_error(error: ValidationError):
	st.error(error.message)
	for issue in error.issues:
		st.write(f"- **{issue.field or 'payload'}**: {issue.message}")
	log.warning(f"Validation failed: {[issue.field for issue in error.issues]}")


def download_datas(products: List[Product], data_type: str):
	"""
	Download products as JSON or CSV.

	Args:
		products: List[Product] : products to export
		data_type: str : 'json' or 'csv'
	"""
	rows = [p.to_json() for p in products]
	if data_type == "json":
		st.download_button(
			label = "📥 Download as JSON",
			data = json.dumps(rows, indent=2, ensure_ascii=False),
			file_name = "products.json",
			mime = "application/json"
		)
	else:
		st.download_button(
			label = "📥 Download as CSV",
			data = pd.DataFrame(rows).to_csv(index=False).encode("utf-8"),
			file_name = "products.csv",
			mime = "text/csv"
		)


def initialize_sessions():
	"""Initialize session state variables."""
	if "products" not in st.session_state:
		st.session_state.products = None
		log.debug("Session state 'products' initialized.")
	if "editing_id" not in st.session_state:
		st.session_state.editing_id = None
		log.debug("Session state 'editing_id' initialized.")
	if "error" not in st.session_state:
		st.session_state.error = None
		log.debug("Session state 'error' initialized.")


if __name__ == "__main__":
	main()
