"""
Configuration system for pgtable using Pydantic.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .database.connection import ConnectionConfig
from .exceptions import ConfigurationError
from .models import COLUMN_ATTR, TABLE_NAME_ATTR, ColumnDescriptor


class ColumnSpec(BaseModel):
    """A declared column, using the resource attribute names."""

    name: str = Field(..., min_length=1, description="Column name")
    type: str = Field(..., min_length=1, description="Column type, e.g. int or varchar")
    max_length: Optional[int] = Field(None, ge=0, description="Character length")
    default: Optional[str] = Field(None, description="Default SQL expression")
    is_null: bool = Field(False, description="Allow NULL values")

    def to_descriptor(self) -> ColumnDescriptor:
        return ColumnDescriptor(
            name=self.name,
            type=self.type,
            max_length=self.max_length,
            default=self.default,
            nullable=self.is_null,
        )


class TableSpec(BaseModel):
    """A declared table."""

    name: str = Field(..., min_length=1, description="Table name")
    rename_from: Optional[str] = Field(
        None, description="Current catalog name when the table is being renamed"
    )
    columns: List[ColumnSpec] = Field(
        default_factory=list, description="Ordered column list"
    )

    @property
    def current_name(self) -> str:
        """Name the table has in the catalog before this declaration is applied."""
        return self.rename_from or self.name

    def to_attributes(self) -> Dict[str, Any]:
        """Render as resource attributes (``name`` and ``column``)."""
        return {
            TABLE_NAME_ATTR: self.name,
            COLUMN_ATTR: [c.to_descriptor().to_attributes() for c in self.columns],
        }


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO", description="Log level"
    )
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    file: Optional[str] = Field(None, description="Log file path")
    max_size: int = Field(10485760, description="Max log file size in bytes")  # 10MB
    backup_count: int = Field(5, description="Number of backup log files")


class PgTableConfig(BaseSettings):
    """Main pgtable configuration."""

    debug: bool = Field(False, description="Enable debug mode")
    dry_run: bool = Field(False, description="Print DDL instead of executing it")

    database: ConnectionConfig = Field(..., description="Connection details")
    tables: List[TableSpec] = Field(
        default_factory=list, description="Declared tables"
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PGTABLE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("tables")
    @classmethod
    def validate_tables(cls, v: List[TableSpec]) -> List[TableSpec]:
        for table in v:
            if table.rename_from == "":
                raise ValueError(f"Table {table.name}: rename_from must not be empty")
        return v

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "PgTableConfig":
        """Load configuration from a YAML file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            data = cls._expand_env_vars(data)

            return cls(**data)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    @classmethod
    def _expand_env_vars(cls, data: Any) -> Any:
        """Recursively expand environment variables in configuration data."""
        if isinstance(data, dict):
            return {k: cls._expand_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [cls._expand_env_vars(item) for item in data]
        elif isinstance(data, str):
            return os.path.expandvars(data)
        else:
            return data

    def get_table(self, name: str) -> TableSpec:
        """Get a declared table by name."""
        for table in self.tables:
            if table.name == name:
                return table
        raise ConfigurationError(f"Table '{name}' is not declared")

    def validate_config(self) -> None:
        """Validate the declared tables for consistency."""
        seen = set()
        for table in self.tables:
            if table.name in seen:
                raise ConfigurationError(f"Table '{table.name}' is declared more than once")
            seen.add(table.name)

            column_names = [c.name for c in table.columns]
            duplicates = sorted({n for n in column_names if column_names.count(n) > 1})
            if duplicates:
                raise ConfigurationError(
                    f"Table '{table.name}' declares duplicate columns: {', '.join(duplicates)}"
                )

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(exclude_none=True),
                f,
                default_flow_style=False,
                indent=2,
                sort_keys=False,
            )
