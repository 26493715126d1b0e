"""
Loader for sparse data points stored as JSON or JSON Lines.

Each record looks like:

    {"features": {"3": 1.5, "17": 0.25}, "target": "sports", "name": "doc-12"}

Feature keys are stringified indices (JSON object keys are always strings).
"target" and "name" are optional.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from ..vector import HashSparseVector
from .instance import Instance


class InstanceLoader:
    """
    Reads data points from a .json file (a list of records) or a
    .jsonl file (one record per line).

    Example:
        >>> loader = InstanceLoader(Path('data/docs.jsonl'))
        >>> instances = loader.load()
        >>> print(len(instances), instances[0].name)
    """

    def __init__(self, path: Union[str, Path]):
        """
        Args:
            path: File to read

        Raises:
            FileNotFoundError: If the file does not exist
        """
        self.path = Path(path)

        if not self.path.exists():
            raise FileNotFoundError(f"Data file does not exist: {self.path}")

    def _read_records(self) -> List[Any]:
        if self.path.suffix == '.jsonl':
            records = []
            with open(self.path, 'r', encoding='utf-8') as f:
                for line in f:
                    line = line.strip()
                    if line:
                        records.append(json.loads(line))
            return records

        with open(self.path, 'r', encoding='utf-8') as f:
            records = json.load(f)

        if not isinstance(records, list):
            raise ValueError(
                f"{self.path} must contain a JSON list of records, "
                f"got {type(records).__name__}"
            )
        return records

    @staticmethod
    def parse_record(record: Dict[str, Any], position: int = 0) -> Instance:
        """
        Convert one decoded record into an Instance.

        Raises:
            ValueError: If the record has no feature map or a feature
                        index/weight is not numeric
        """
        if not isinstance(record, dict) or not isinstance(record.get('features'), dict):
            raise ValueError(f"record {position} has no 'features' object")

        try:
            features = {int(k): float(v) for k, v in record['features'].items()}
        except (TypeError, ValueError) as e:
            raise ValueError(f"record {position} has a non-numeric feature: {e}") from e

        if any(index < 0 for index in features):
            raise ValueError(f"record {position} has a negative feature index")

        return Instance(
            HashSparseVector(features),
            target=record.get('target'),
            name=record.get('name'),
        )

    def load(self) -> List[Instance]:
        """
        Load every record in file order.

        Raises:
            json.JSONDecodeError: If the file is not valid JSON
            ValueError: If a record is malformed
        """
        return [
            self.parse_record(record, position)
            for position, record in enumerate(self._read_records())
        ]
