"""shoal core: transformers, storage, upstream access and ambient services."""
