"""Assembly of a reader from its configuration."""

import logging
from typing import Optional

from pecreader.reader import Reader
from pecreader.reweighting import CorrectionlibBTagReweighter, JetReweighter
from pecreader.schema import ReaderConfig
from pecreader.store import PartitionStore, get_store

logger = logging.getLogger(__name__)


def build_reweighter(config: ReaderConfig) -> Optional[JetReweighter]:
    """Create the b-tag reweighter requested by the configuration, if any."""
    settings = config.reweighting
    if not config.is_mc or not settings.file:
        return None

    return CorrectionlibBTagReweighter.from_file(
        settings.file,
        settings.correction,
        max_abs_eta=settings.max_abs_eta,
        min_pt=settings.min_pt,
    )


def build_reader(config: ReaderConfig, store: Optional[PartitionStore] = None) -> Reader:
    """
    Build a reader from a validated configuration.

    Parameters
    ----------
    config : ReaderConfig
        Reader configuration
    store : PartitionStore, optional
        Store to read from. By default it is opened from ``config.source``;
        in that case the caller owns it through ``reader.store``.

    Returns
    -------
    Reader
        Reader bound to the first partition, with the configured systematic
        selection and reweighting switch applied
    """
    if store is None:
        store = get_store(config.source, chunk_size=config.chunk_size)

    reader = Reader(
        store,
        config.partitions,
        is_mc=config.is_mc,
        reweighter=build_reweighter(config),
    )
    reader.set_systematics(config.systematics.type, config.systematics.direction)
    reader.set_reweighting_enabled(config.reweighting.enable)

    logger.info(
        f"Built {'simulation' if config.is_mc else 'data'} reader over "
        f"{len(config.partitions)} partition(s) with systematics '{reader.systematics}'"
    )
    return reader
