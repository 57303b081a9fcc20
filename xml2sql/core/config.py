"""Configuration management for the xml2sql tool."""
import os
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
import yaml
from dataclasses import dataclass, field, asdict

from xml2sql.core.exceptions import ConfigError

# Set up the default configuration locations
DEFAULT_CONFIG_FILE = "config/config.yaml"
DEFAULT_CONFIG_DIRS = [
    "~/.xml2sql",
    "/etc/xml2sql",
]

# Prefix used by the original xml2sql scripts for installable dumps
DEFAULT_LIVE_PREFIX = "xxxxx_"

@dataclass
class DatabaseConfig:
    """Database connection configuration."""
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    database: str = ""
    prefix: str = ""  # Table prefix replaced by the generic placeholder on export
    use_pure: bool = True
    charset: str = "utf8mb4"

@dataclass
class ExportConfig:
    """Export operation configuration."""
    tables: Union[str, List[str]] = field(default_factory=list)
    with_structure: bool = True
    with_data: bool = False
    output: str = "xml2sql-created.xml"
    compression: bool = False

@dataclass
class ConvertConfig:
    """Conversion (XML to SQL) configuration."""
    input: str = ""
    output: str = ""
    format: str = "mysql"
    prefix: str = DEFAULT_LIVE_PREFIX
    sample_data: bool = False
    pretty: bool = False
    compression: bool = False

@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: str = ""
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

@dataclass
class Config:
    """Main configuration class."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    convert: ConvertConfig = field(default_factory=ConvertConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

def load_config(config_file: Optional[Union[Path, str]] = None) -> Config:
    """Load configuration from a file.

    When no file is given the default locations are searched; if none of
    them holds a configuration the built-in defaults are returned.

    Args:
        config_file: Path to the configuration file

    Returns:
        Config object with loaded settings

    Raises:
        ConfigError: If the file is missing, unreadable or not a mapping
    """
    if config_file is None:
        config_file = _find_config_file()
        if config_file is None:
            return Config()

    if isinstance(config_file, str):
        config_file = Path(config_file)

    if not config_file.exists():
        raise ConfigError(f"Configuration file not found: {config_file}")

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config_dict = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read configuration {config_file}: {str(e)}")

    if not isinstance(config_dict, dict):
        raise ConfigError(f"Configuration {config_file} must be a mapping")

    return Config(
        database=_section(DatabaseConfig, config_dict, 'database'),
        export=_section(ExportConfig, config_dict, 'export'),
        convert=_section(ConvertConfig, config_dict, 'convert'),
        logging=_section(LoggingConfig, config_dict, 'logging')
    )

def _section(cls, config_dict: Dict[str, Any], name: str):
    """Build one configuration dataclass from its YAML section."""
    values = config_dict.get(name) or {}
    if not isinstance(values, dict):
        raise ConfigError(f"Configuration section '{name}' must be a mapping")

    defaults = cls()
    known = asdict(defaults).keys()
    unknown = [key for key in values if key not in known]
    if unknown:
        raise ConfigError(f"Unknown option(s) in section '{name}': {', '.join(unknown)}")

    return cls(**{key: values.get(key, getattr(defaults, key)) for key in known})

def _find_config_file() -> Optional[Path]:
    """Find the configuration file in the default locations.

    Returns:
        Path to the configuration file, or None if not found
    """
    if os.path.exists(DEFAULT_CONFIG_FILE):
        return Path(DEFAULT_CONFIG_FILE)

    for directory in DEFAULT_CONFIG_DIRS:
        expanded_dir = os.path.expanduser(directory)
        config_path = os.path.join(expanded_dir, "config.yaml")
        if os.path.exists(config_path):
            return Path(config_path)

    return None

def save_config(config: Config, file_path: Union[Path, str]) -> None:
    """Save the configuration to a file.

    Args:
        config: Configuration object
        file_path: Path to the file

    Raises:
        ConfigError: If the configuration cannot be saved
    """
    try:
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(_config_to_dict(config), f, default_flow_style=False)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to save configuration: {str(e)}")

def _config_to_dict(config: Config) -> Dict[str, Any]:
    """Convert a configuration object to a dictionary.

    Args:
        config: Configuration object

    Returns:
        Dictionary representation of the configuration
    """
    result = asdict(config)

    # Remove None values for cleaner output
    for section in result.values():
        keys_to_remove = [k for k, v in section.items() if v is None]
        for key in keys_to_remove:
            del section[key]

    return result
