"""DTOs de la capa de aplicación."""
