"""Base classes for configuration models."""

from pydantic import BaseModel, ConfigDict


class SubscriptableModel(BaseModel):
    """A Pydantic BaseModel that supports dictionary-style item access."""

    model_config = ConfigDict(extra="forbid")

    def __getitem__(self, key):
        """Allows dictionary-style `model[key]` access."""
        return getattr(self, key)

    def __contains__(self, key):
        """Allows `key in model` checks."""
        return key in type(self).model_fields

    def get(self, key, default=None):
        """Allows `.get(key, default)` method."""
        return getattr(self, key, default)
