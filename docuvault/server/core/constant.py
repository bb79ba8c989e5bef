PROJECT_NAME = "DocuVault"
API_V1_STR = "/api/v1"
API_VERSION = "0.1.0"

# Header set by the upstream gateway once the caller is authenticated
USER_ID_HEADER = "X-User-Id"

ROOT_FOLDER_LABEL = "Root"
