from __future__ import annotations

# Indexed 0=Sunday .. 6=Saturday, plural form used in "closed on ..." messages.
DAY_NAMES = {
    "es": ("domingos", "lunes", "martes", "miércoles", "jueves", "viernes", "sábados"),
    "en": ("Sundays", "Mondays", "Tuesdays", "Wednesdays", "Thursdays", "Fridays", "Saturdays"),
}

MESSAGES = {
    "es": {
        "closed_weekday": "El negocio está cerrado los {day}",
        "closed_date": "El negocio está cerrado el {date}",
        "no_hours": "No hay horario configurado para los {day}",
        "opens_at": "Abrimos a las {open}",
        "ends_after_close": "El servicio dura {duration} min y terminaría a las {end}, después del cierre ({close})",
        "no_shift": "No hay turno de servicio disponible a las {time}. Por favor revisa los horarios de comida/cena.",
        "slot_full": "Slot lleno: capacidad {capacity}, citas {count}",
        "slot_available": "Slot disponible",
        "available": "Horario disponible",
        "blocked": "Horario bloqueado: {reason}",
        "blocked_default": "no disponible",
        "table_available": "Mesa disponible",
        "no_tables_for_party": "No hay mesas disponibles para este número de personas en este horario.",
        "no_tables_configured": "No hay mesas disponibles en este restaurante",
        "no_tables_at_time": "No hay mesas disponibles en ese horario",
        "no_tables_nor_combinations": "No hay mesas individuales ni combinaciones disponibles para {party} personas",
        "tables_not_required": "Este negocio no requiere asignación de mesas",
        "assignment_error": "Error al buscar mesa disponible",
        "table_perfect": "Mesa {label} - Capacidad perfecta para {party} personas",
        "table_good": "Mesa {label} - Buen ajuste ({capacity} plazas para {party})",
        "table_available_seats": "Mesa {label} - Disponible ({capacity} plazas)",
        "table_zone": " - Zona {zone}",
        "combination": "Combinación {name} - {capacity} plazas",
        "booking_created": "Cita creada exitosamente",
        "booking_unavailable": "Este horario ya no está disponible.",
        "confirmation": "Hola {name}, tu cita en {business} está confirmada para el {date} a las {time}.",
        "confirmation_tables": " Mesa: {tables}.",
    },
    "en": {
        "closed_weekday": "The business is closed on {day}",
        "closed_date": "The business is closed on {date}",
        "no_hours": "No opening hours configured for {day}",
        "opens_at": "We open at {open}",
        "ends_after_close": "The service takes {duration} min and would end at {end}, after closing ({close})",
        "no_shift": "No service shift available at {time}. Please check lunch/dinner hours.",
        "slot_full": "Slot full: capacity {capacity}, bookings {count}",
        "slot_available": "Slot available",
        "available": "Time available",
        "blocked": "Time blocked: {reason}",
        "blocked_default": "unavailable",
        "table_available": "Table available",
        "no_tables_for_party": "No tables available for this party size at this time.",
        "no_tables_configured": "This restaurant has no tables available",
        "no_tables_at_time": "No tables available at that time",
        "no_tables_nor_combinations": "No single tables or combinations available for {party} people",
        "tables_not_required": "This business does not use table assignment",
        "assignment_error": "Error while looking for an available table",
        "table_perfect": "Table {label} - Perfect fit for {party} people",
        "table_good": "Table {label} - Good fit ({capacity} seats for {party})",
        "table_available_seats": "Table {label} - Available ({capacity} seats)",
        "table_zone": " - Zone {zone}",
        "combination": "Combination {name} - {capacity} seats",
        "booking_created": "Booking created successfully",
        "booking_unavailable": "This time is no longer available.",
        "confirmation": "Hi {name}, your booking at {business} is confirmed for {date} at {time}.",
        "confirmation_tables": " Table: {tables}.",
    },
}

DEFAULT_LOCALE = "es"


def _locale(locale: str | None) -> str:
    return locale if locale in MESSAGES else DEFAULT_LOCALE


def message(key: str, locale: str | None = None, **params: object) -> str:
    return MESSAGES[_locale(locale)][key].format(**params)


def day_name(day_index: int, locale: str | None = None) -> str:
    return DAY_NAMES[_locale(locale)][day_index]
