"""Passenger entrypoint for the fiscal ticket backend.

The fiscal dataset is validated at import so a broken snapshot stops the
worker from booting instead of failing on the first calculation request.
"""

import logging

from fiscalticket.backend.app import create_app
from fiscalticket.backend.config.dataset import load_dataset

_LOGGER = logging.getLogger(__name__)

dataset = load_dataset()
_LOGGER.info(
    "Loaded fiscal dataset %s with %d jurisdictions",
    dataset.meta.snapshot,
    len(dataset.jurisdictions),
)

# Passenger looks up ``application`` on this module.
application = create_app()
