# Schemas package init: request/response DTOs
