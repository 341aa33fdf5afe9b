"""Configuration for callers of the tax engine.

Settings come from the environment, with a ``.env`` file loaded first.
The engine itself never reads configuration; callers build the company
profile here and pass it in.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .models import DEFAULT_UQC, CompanyTaxProfile


load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Process-wide settings.

    Attributes:
        company: Tax identity of the selling company
        default_uqc: Unit quantity code stamped onto records
        log_level: Logging level name
    """
    company: CompanyTaxProfile
    default_uqc: str = DEFAULT_UQC
    log_level: str = "INFO"


def load_company_profile() -> CompanyTaxProfile:
    """Build the company tax profile from COMPANY_STATE and COMPANY_GSTIN."""
    return CompanyTaxProfile(
        state=os.getenv("COMPANY_STATE", ""),
        gstin=os.getenv("COMPANY_GSTIN") or None
    )


def load_settings() -> Settings:
    return Settings(
        company=load_company_profile(),
        default_uqc=os.getenv("DEFAULT_UQC", DEFAULT_UQC),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper()
    )


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging at the given or configured level."""
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO))
