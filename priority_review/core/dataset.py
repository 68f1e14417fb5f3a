"""
Correction review scope only. Do not implement beyond this file's responsibilities.
In-memory scheduling dataset and the default data mutator for applied suggestions.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from util.logging import logger

from .errors import MutationError
from .suggestions import CorrectionSuggestion

Row = Dict[str, Any]


@dataclass
class ReviewDataset:
    clients: List[Row] = field(default_factory=list)
    workers: List[Row] = field(default_factory=list)
    tasks: List[Row] = field(default_factory=list)

    def rows_for(self, entity_type: str) -> List[Row]:
        if entity_type == "client":
            return self.clients
        if entity_type == "worker":
            return self.workers
        if entity_type == "task":
            return self.tasks
        raise MutationError(f"Unknown entity type: {entity_type}")

    def replace_rows(self, entity_type: str, rows: List[Row]):
        if entity_type == "client":
            self.clients = rows
        elif entity_type == "worker":
            self.workers = rows
        elif entity_type == "task":
            self.tasks = rows
        else:
            raise MutationError(f"Unknown entity type: {entity_type}")

    def to_dict(self) -> Dict[str, List[Row]]:
        return {"clients": self.clients, "workers": self.workers, "tasks": self.tasks}


class DatasetMutator:
    """Writes a suggestion's corrected value into the targeted row and column.

    The row list is replaced with a new list holding a copied row, so earlier
    snapshots of the dataset are never modified.
    """

    def __init__(self, dataset: ReviewDataset):
        self.dataset = dataset

    def __call__(self, suggestion: CorrectionSuggestion) -> Row:
        error = suggestion.error
        rows = self.dataset.rows_for(error.entity_type)

        if not rows:
            raise MutationError(f"No data found for entity type: {error.entity_type}")

        if error.row >= len(rows):
            raise MutationError(f"Row index out of bounds: {error.row}, max: {len(rows) - 1}")

        if suggestion.corrected_value is None:
            raise MutationError(f"No corrected value in suggestion for {error.entity_type} row {error.row}")

        new_value = suggestion.corrected_value
        if isinstance(new_value, list):
            new_value = list(new_value)

        updated_row = dict(rows[error.row])
        previous = updated_row.get(error.column)
        updated_row[error.column] = new_value

        updated_rows = list(rows)
        updated_rows[error.row] = updated_row
        self.dataset.replace_rows(error.entity_type, updated_rows)

        logger.log_operation("dataset.update", "success", {
            "entity_type": error.entity_type,
            "row": error.row,
            "column": error.column,
            "previous": previous,
            "value": new_value
        })
        return updated_row
