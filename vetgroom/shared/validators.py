"""Shared validation utilities"""

import re
from datetime import date, datetime
from typing import Optional


def validate_mx_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a Mexican phone number.

    Args:
        phone: Phone number string in various formats (+52 81 1234 5678, 8112345678, ...)

    Returns:
        Normalized 10 digit phone number

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    # Remove all non-digit characters
    digits = re.sub(r"\D", "", phone)

    # Handle +52 prefix
    if digits.startswith("52") and len(digits) == 12:
        digits = digits[2:]

    if len(digits) != 10:
        raise ValueError("El teléfono debe tener 10 dígitos")

    return digits


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Formato de correo inválido")

    return email


def validate_postal_code(postal_code: Optional[str]) -> Optional[str]:
    """Mexican postal codes are exactly 5 digits"""
    if not postal_code:
        return postal_code

    postal_code = postal_code.strip()
    if not re.fullmatch(r"\d{5}", postal_code):
        raise ValueError("El código postal debe tener 5 dígitos")
    return postal_code


def validate_time_string(value: Optional[str]) -> Optional[str]:
    """Validate a 24h HH:MM time string, zero padding single digit hours"""
    if value is None:
        return None

    match = re.fullmatch(r"(\d{1,2}):(\d{2})", value.strip())
    if not match:
        raise ValueError("La hora debe tener formato HH:MM")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError("Hora inválida")
    return f"{hours:02d}:{minutes:02d}"


def validate_date_string(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD string into a date, rejecting impossible dates"""
    if value is None:
        return None

    if not re.fullmatch(r"\d{4}-\d{2}-\d{2}", value.strip()):
        raise ValueError("La fecha debe tener formato YYYY-MM-DD")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError as e:
        raise ValueError("Fecha inválida") from e


def validate_hex_color(value: Optional[str]) -> Optional[str]:
    """Validate #RRGGBB color"""
    if not value:
        return value

    if not re.fullmatch(r"#[0-9a-fA-F]{6}", value):
        raise ValueError("El color debe tener formato #RRGGBB")
    return value.upper()


def validate_subdomain(subdomain: str) -> str:
    """
    Validate a tenant subdomain label (e.g., "vetgroom1").

    Raises:
        ValueError: If subdomain format is invalid
    """
    if not subdomain:
        raise ValueError("Subdomain is required")

    subdomain = subdomain.strip().lower()
    if not re.fullmatch(r"[a-z0-9]([a-z0-9\-]{0,61}[a-z0-9])?", subdomain):
        raise ValueError("Invalid subdomain format")

    return subdomain
