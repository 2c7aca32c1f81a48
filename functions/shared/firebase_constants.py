GALLERIES_COLLECTION = "galleries"
GALLERY_ITEMS_FIELD = "items"

CONFIG_COLLECTION = "config"
SITE_DOCUMENT = "site"
SHADER_FIELD = "mobileShader"

IMAGES_FOLDER = "images"
VIDEOS_FOLDER = "videos"
