"""Load JSON event payload fixtures with live timestamp injection."""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from dpcheck.core import constants
from dpcheck.core.exceptions import PayloadNotFoundException, PayloadParseException
from dpcheck.utils.logging import get_logger
from dpcheck.utils.timestamp import current_timestamp

PathLike = Union[str, Path]


class PayloadLoader:
    """Resolves, templates and parses payload fixtures.

    The fixture on disk is never modified; every ``load`` call renders it with
    a fresh timestamp.
    """

    def __init__(
        self,
        root: Optional[PathLike] = None,
        clock: Callable[[], str] = current_timestamp,
    ):
        """Initialize the loader.

        Args:
            root: Directory used for the fallback candidate (default: the
                process working directory at load time)
            clock: Returns the timestamp string to inject
        """
        self.root = Path(root) if root is not None else None
        self.clock = clock
        self.logger = get_logger("payload_loader")

    def candidates(self, path: PathLike) -> List[Path]:
        """Candidate locations for ``path``, in lookup order."""
        given = Path(path).expanduser()
        root = self.root or Path.cwd()
        relative = given.relative_to(given.anchor) if given.is_absolute() else given
        rerooted = root / relative

        ordered = [given.resolve(), rerooted.resolve()]
        return list(dict.fromkeys(ordered))

    def resolve(self, path: PathLike) -> Path:
        tried = self.candidates(path)
        for candidate in tried:
            self.logger.debug(f"🔍 Looking for payload file at: {candidate}")
            if candidate.is_file():
                return candidate
        raise PayloadNotFoundException(tried)

    def load(self, path: PathLike) -> Dict[str, Any]:
        """Load the fixture at ``path`` and inject the current timestamp.

        Every ``{{CURRENT_TIMESTAMP}}`` token is replaced before parsing. A
        ``timestamp`` field is added when the document has none; an existing
        one is kept as-is.
        """
        file_path = self.resolve(path)
        self.logger.info(f"📄 Loading payload from: {file_path}")

        timestamp = self.clock()
        try:
            raw = file_path.read_text(encoding="utf-8")
            rendered = raw.replace(constants.TIMESTAMP_PLACEHOLDER, timestamp)
            payload = json.loads(rendered)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PayloadParseException(file_path, e) from e

        if not isinstance(payload, dict):
            cause = TypeError(f"expected a JSON object, got {type(payload).__name__}")
            raise PayloadParseException(file_path, cause)

        if constants.TIMESTAMP_FIELD not in payload:
            payload[constants.TIMESTAMP_FIELD] = timestamp
            self.logger.info(f"⏱️ Added timestamp: {timestamp}")
        else:
            self.logger.info(f"⏱️ Using timestamp: {payload[constants.TIMESTAMP_FIELD]}")

        return payload


def load_payload(path: PathLike) -> Dict[str, Any]:
    """Load a payload fixture with the default loader."""
    return PayloadLoader().load(path)
