"""Serializer configuration."""

import os
from typing import Optional

import yaml

from binserial.exceptions import ConfigurationError


class SerializerConfig:
    """Configuration for decoding limits and the image dimension policy.

    Attributes:
        max_collection_length: Upper bound on any decoded count or length.
            ``None`` leaves counts bounded only by the bytes left in the
            stream.
        strict_image_dimensions: If True, a decoded raster whose size
            differs from the declared width and height raises
            :class:`~binserial.exceptions.ImageDecodeError`. Otherwise the
            decoded raster wins and the mismatch is logged.

    Example:
        From YAML::

            config = SerializerConfig.from_yaml_string(
                "max_collection_length: 100000\\nstrict_image_dimensions: true"
            )
    """

    def __init__(
        self,
        max_collection_length: Optional[int] = None,
        strict_image_dimensions: bool = False,
    ):
        self._max_collection_length = max_collection_length
        self._strict_image_dimensions = strict_image_dimensions
        self._validate()

    def _validate(self) -> None:
        if self._max_collection_length is not None:
            if isinstance(self._max_collection_length, bool) or not isinstance(
                self._max_collection_length, int
            ):
                raise ConfigurationError("max_collection_length must be an integer")
            if self._max_collection_length < 0:
                raise ConfigurationError("max_collection_length must be >= 0")
        if not isinstance(self._strict_image_dimensions, bool):
            raise ConfigurationError("strict_image_dimensions must be a boolean")

    @property
    def max_collection_length(self) -> Optional[int]:
        """Get the maximum accepted decoded count, or None for no limit."""
        return self._max_collection_length

    @max_collection_length.setter
    def max_collection_length(self, value: Optional[int]) -> None:
        self._max_collection_length = value
        self._validate()

    @property
    def strict_image_dimensions(self) -> bool:
        """Get whether declared and decoded image sizes must agree."""
        return self._strict_image_dimensions

    @strict_image_dimensions.setter
    def strict_image_dimensions(self, value: bool) -> None:
        self._strict_image_dimensions = value
        self._validate()

    @classmethod
    def from_dict(cls, data: dict) -> "SerializerConfig":
        """Create SerializerConfig from a dictionary."""
        return cls(
            max_collection_length=data.get("max_collection_length"),
            strict_image_dimensions=data.get("strict_image_dimensions", False),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "SerializerConfig":
        """Load configuration from a YAML file.

        Args:
            yaml_path: Path to the YAML configuration file.

        Returns:
            SerializerConfig instance.

        Raises:
            ConfigurationError: If the file cannot be read or parsed.
        """
        if not os.path.exists(yaml_path):
            raise ConfigurationError(f"Configuration file not found: {yaml_path}")

        try:
            with open(yaml_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML: {e}", cause=e)
        except IOError as e:
            raise ConfigurationError(f"Failed to read configuration file: {e}", cause=e)

        return cls._from_loaded(data)

    @classmethod
    def from_yaml_string(cls, yaml_content: str) -> "SerializerConfig":
        """Load configuration from a YAML string.

        Raises:
            ConfigurationError: If the YAML cannot be parsed.
        """
        try:
            data = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML: {e}", cause=e)

        return cls._from_loaded(data)

    @classmethod
    def _from_loaded(cls, data) -> "SerializerConfig":
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a mapping")

        if "binserial" in data:
            data = data["binserial"] or {}

        return cls.from_dict(data)

    def __repr__(self) -> str:
        return (
            f"SerializerConfig(max_collection_length={self._max_collection_length!r}, "
            f"strict_image_dimensions={self._strict_image_dimensions!r})"
        )
