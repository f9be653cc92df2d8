"""Pydantic request/response models. Wire format is camelCase (see CamelModel)."""
