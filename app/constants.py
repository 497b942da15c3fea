"""
Constants for roles, ID card lifecycle and storage buckets
"""

# Role constants
ROLE_ADMIN = "Admin"
ROLE_HR = "HR"

# Employee ID numbers
ID_NUMBER_WIDTH = 6
EMPLOYEE_ID_SEQUENCE = "employee_id_no"

# An exported ID card is valid for this many years
ID_VALIDITY_YEARS = 2

# Storage buckets
BUCKET_EMPLOYEE_PHOTO = "employee"
BUCKET_SIGNATURE = "signature"
BUCKET_QRCODE = "qrcode"
BUCKET_ID_TEMPLATES = "id_templates"
BUCKET_BUSINESS_UNITS = "business_units"

ALLOWED_IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif")

# Settings keys
NETWORK_IMAGES_PATH_KEY = "network_images_path"

SERVICE_NAME = "hr-id-admin"
