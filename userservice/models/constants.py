"""Constants for userservice.

Field names used when building dynamic predicates and validating sort keys.
"""

# Attribute names on the users table
ID_FIELD = "id"
EMAIL_FIELD = "email"
FIRST_NAME_FIELD = "first_name"
LAST_NAME_FIELD = "last_name"
PHONE_NUMBER_FIELD = "phone_number"
CREATED_ON_FIELD = "created_on"
UPDATED_ON_FIELD = "updated_on"
VERSION_FIELD = "version"

# Fields searched by free text, in match order
SEARCH_TEXT_FIELDS = (FIRST_NAME_FIELD, LAST_NAME_FIELD, EMAIL_FIELD, PHONE_NUMBER_FIELD)

# Sort keys accepted from clients (API names and column names)
SORTABLE_FIELDS = {
    "id": ID_FIELD,
    "email": EMAIL_FIELD,
    "firstName": FIRST_NAME_FIELD,
    "first_name": FIRST_NAME_FIELD,
    "lastName": LAST_NAME_FIELD,
    "last_name": LAST_NAME_FIELD,
    "phoneNumber": PHONE_NUMBER_FIELD,
    "phone_number": PHONE_NUMBER_FIELD,
    "createdOn": CREATED_ON_FIELD,
    "created_on": CREATED_ON_FIELD,
    "updatedOn": UPDATED_ON_FIELD,
    "updated_on": UPDATED_ON_FIELD,
    "version": VERSION_FIELD,
}

# Pagination defaults
DEFAULT_PAGE_NUMBER = 0
DEFAULT_PAGE_SIZE = 10
DEFAULT_SORT_FIELD = "id"
DEFAULT_SORT_DIRECTION = "asc"

# Cache
USERS_CACHE_NAME = "users"
DEFAULT_CACHE_TTL_SEC = 3600
DEFAULT_CACHE_MAX_SIZE = 1000

# Messages
USER_NOT_FOUND_MESSAGE = "User not found"
USER_ALREADY_EXISTS_MESSAGE = "User already exists"
CONCURRENT_MODIFICATION_MESSAGE = "Concurrent modification detected. Please try again"
