help_text = """<b>Product authoring</b>

/new — start a new product
/edit <code>ID</code> — edit an existing product
/set <code>field value</code> — name, description, meta_title, meta_description, manufacturer, model, price, stock_quantity, direct_sale, hide_price, online_payment
/attr <code>name [value]</code> — fill a product detail
/type — choose product types
/brochure — send a PDF brochure
/primary — send the primary image
/gallery — send gallery images, then /done
/video <code>link</code> — add a video link
/media — staged and saved media
/preview — live name and URL
/submit — save the product
/cancel — drop the form"""

no_session = "No product form is open. Start one with /new or /edit <code>ID</code>."
select_category = "📦 Select category:"
select_subcategory = "📂 Select subcategory:"
no_categories = "No categories available."
categories_failed = "❌ Failed to load categories: {error}"
product_failed = "❌ Failed to load product: {error}"
form_cancelled = "Form closed. Nothing that was not submitted has been saved."
set_usage = "Format: <code>/set field value</code>"
attr_usage = "Format: <code>/attr name [value]</code>"
video_usage = "Format: <code>/video https://youtube.com/watch?v=...</code>"
edit_usage = "Format: <code>/edit ID</code>"
saved_field = "✅ {field} updated"
send_brochure = "Send the brochure as a PDF document."
send_primary = "Send the primary image (50 KB – 1 MB)."
send_gallery = "Send gallery images (50 KB – 1 MB each). Finish with /done."
gallery_done = "🖼 Gallery: {count} image(s) staged."
staged_item = "📎 Staged: {title}"
choose_option = "Choose {label}:"
choose_types = "Product type:"
already_submitting = "⏳ The product is already being saved, please wait."
submitting = "⏳ {label}..."
no_media = "No media yet."
confirm_delete = "Delete <b>{title}</b>? This removes it from the product for good."
deletion_cancelled = "Deletion cancelled"
media_missing = "This item is no longer there."
not_ready = "Select a category (and subcategory) first."
