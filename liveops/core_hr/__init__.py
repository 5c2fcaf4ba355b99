"""Core HR module — Employee model, salary configuration and capability normalization."""

from liveops.core_hr.models import Employee

__all__ = ["Employee"]
