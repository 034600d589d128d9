import logging
import os
from typing import Optional

import yaml

from adlinkcrawl.domain.options import Options
from adlinkcrawl.exceptions import ConfigurationError
from adlinkcrawl.services.options_parser import OptionsParser

logger = logging.getLogger(__name__)


class OptionsService:
    """Loads job options from the YAML options file."""

    def __init__(self, options_path: str, parser: Optional[OptionsParser] = None):
        self.options_path = options_path
        self.parser = parser or OptionsParser()

    def get_options_yaml(self) -> str:
        if not os.path.isfile(self.options_path):
            raise ConfigurationError(f"Options file not found: {self.options_path}")
        with open(self.options_path, "r", encoding="utf-8") as f:
            return f.read()

    def load(self) -> Options:
        content = self.get_options_yaml()
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Options file {self.options_path} is not valid YAML: {e}") from e
        options = self.parser.parse(data)
        logger.info("Loaded options from %s", self.options_path)
        return options
