"""Per-run state shared by every texture group."""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Set

from PIL import Image

from packsmith.schema.identifier import Identifier
from packsmith.schema.model import Model


class RunContext:
    """
    Model cache and pending atlases for one optimization run.

    Models are shared between every texture group they take part in, so edits
    made by one group are visible to the next. Mutations of one model are
    serialized through its own lock; reads take no lock. Accepted atlases are
    held here until the run writes its output.
    """

    def __init__(self):
        self.models: Dict[Identifier, Model] = {}
        self.touched: Set[Identifier] = set()
        self.atlases: Dict[Identifier, Image.Image] = {}
        self._locks: Dict[Identifier, threading.Lock] = {}
        self._guard = threading.Lock()

    def add_model(self, identifier: Identifier, model: Model) -> None:
        self.models[identifier] = model

    def get_model(self, identifier: Identifier) -> Optional[Model]:
        return self.models.get(identifier)

    @contextmanager
    def edit_model(self, identifier: Identifier) -> Iterator[Model]:
        """Exclusive section for mutating one cached model; marks it as touched."""
        with self._guard:
            lock = self._locks.setdefault(identifier, threading.Lock())
        with lock:
            yield self.models[identifier]
            self.touched.add(identifier)

    def add_atlas(self, identifier: Identifier, image: Image.Image) -> None:
        with self._guard:
            self.atlases[identifier] = image
