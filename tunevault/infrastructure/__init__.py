from .object_store import ObjectStoreGateway, S3ObjectStoreGateway  # noqa: F401
