"""Reader configuration models and loading utilities.

Configurations are YAML files validated with Pydantic. Individual settings can
be overridden from the command line in OmegaConf dot-list form, e.g.
``reweighting.enable=false``.
"""

from pathlib import Path
from typing import Annotated, List, Optional, Type, Union

from omegaconf import OmegaConf
from pydantic import BaseModel, Field, field_validator, model_validator

from pecreader.schema.base import SubscriptableModel
from pecreader.store.chunked import DEFAULT_CHUNK_SIZE
from pecreader.systematics import SystDirection, SystType


class SystematicsConfig(SubscriptableModel):
    type: Annotated[
        SystType,
        Field(default=SystType.nominal, description="Initial systematic variation type"),
    ]
    direction: Annotated[
        SystDirection,
        Field(
            default=SystDirection.up,
            description="Initial variation direction. Ignored for 'nominal'.",
        ),
    ]


class ReweightingConfig(SubscriptableModel):
    """B-tag shape reweighting settings.

    Attributes
    ----------
    enable : bool
        Apply per-jet factors on top of the stored event weight
    file : Optional[str]
        correctionlib JSON (or .json.gz) file with the shape correction
    correction : str
        Name of the correction inside ``file``
    max_abs_eta : float
        Jets beyond this |eta| get no factor
    min_pt : float
        Jets below this pt get no factor
    """

    enable: Annotated[
        bool,
        Field(default=True, description="Apply b-tag shape reweighting to simulation"),
    ]
    file: Annotated[
        Optional[str],
        Field(default=None, description="Path to the correctionlib file"),
    ]
    correction: Annotated[
        str,
        Field(default="deepCSV_shape", description="Correction name in the file"),
    ]
    max_abs_eta: Annotated[
        float,
        Field(default=2.4, gt=0.0, description="Tagging acceptance in |eta|"),
    ]
    min_pt: Annotated[
        float,
        Field(default=20.0, ge=0.0, description="Minimal jet pt for a factor, GeV"),
    ]


class ReaderConfig(SubscriptableModel):
    """Top-level configuration of an event reader."""

    source: Annotated[
        str,
        Field(description="ROOT file or directory of Parquet files to read"),
    ]
    partitions: Annotated[
        List[str],
        Field(min_length=1, description="Ordered names of trees/partitions to read"),
    ]
    is_mc: Annotated[
        bool,
        Field(default=True, description="Whether the source is simulation"),
    ]
    chunk_size: Annotated[
        int,
        Field(
            default=DEFAULT_CHUNK_SIZE,
            gt=0,
            description="Number of entries loaded per read from the store",
        ),
    ]
    systematics: Annotated[
        SystematicsConfig,
        Field(default_factory=SystematicsConfig, description="Initial systematic selection"),
    ]
    reweighting: Annotated[
        ReweightingConfig,
        Field(default_factory=ReweightingConfig, description="Per-jet reweighting settings"),
    ]
    log_level: Annotated[
        str,
        Field(default="INFO", description="Logging level"),
    ]

    @field_validator("partitions", mode="before")
    @classmethod
    def single_partition_to_list(cls, value):
        if isinstance(value, str):
            return [value]
        return value

    @model_validator(mode="after")
    def validate_config(self) -> "ReaderConfig":
        """Validate configuration for duplicates and consistency."""
        if len(self.partitions) != len(set(self.partitions)):
            raise ValueError("Duplicate partition names found in configuration.")

        if self.is_mc and self.reweighting.enable and not self.reweighting.file:
            raise ValueError(
                "Reweighting is enabled for simulation but no correction file "
                "provided. Set 'reweighting.file' or 'reweighting.enable=false'."
            )

        return self


def _is_known_key(model: Type[BaseModel], dotted_key: str) -> bool:
    current = model
    for part in dotted_key.split("."):
        if current is None or part not in current.model_fields:
            return False
        annotation = current.model_fields[part].annotation
        if isinstance(annotation, type) and issubclass(annotation, BaseModel):
            current = annotation
        else:
            current = None
    return True


def load_config(
    path: Union[str, Path], overrides: Optional[List[str]] = None
) -> ReaderConfig:
    """
    Load a YAML reader configuration, applying dot-list overrides.

    Parameters
    ----------
    path : str or Path
        YAML configuration file
    overrides : list of str, optional
        Overrides in OmegaConf dotlist format (e.g. ``is_mc=false``)

    Returns
    -------
    ReaderConfig
        Validated configuration

    Raises
    ------
    ValueError
        If an override is not of the form ``key=value``
    KeyError
        If an override targets a setting that does not exist
    """
    base = OmegaConf.load(path)

    if overrides:
        for arg in overrides:
            try:
                key, _ = arg.split("=", 1)
            except ValueError:
                raise ValueError(
                    f"Invalid override format: {arg}. Expected 'key=value'"
                ) from None

            if not _is_known_key(ReaderConfig, key):
                raise KeyError(f"Cannot override non-existent setting '{key}'")

        base = OmegaConf.merge(base, OmegaConf.from_dotlist(overrides))

    return ReaderConfig.model_validate(OmegaConf.to_container(base, resolve=True))
