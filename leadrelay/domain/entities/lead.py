"""Lead entity — a prospect captured by the voice agent."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Lead:
    first_name: str
    last_name: str
    email: str | None = None
    phone: str | None = None
    summary: str | None = None
    source: str | None = None
    tags: list[str] = field(default_factory=list)
    destination: str | None = None
    cruise_date: str | None = None
    adults: int | float | None = None
    children: int | float | None = None
    purchase_urgency: str | None = None

    def deal_name(self) -> str:
        return f"Crucero: {self.destination or 'Destino'} · {self.cruise_date or 'Fecha'}"

    def custom_field_values(self) -> dict[str, object]:
        """Values keyed by the custom-field slot they are stored in."""
        return {
            "destino": self.destination,
            "fecha": self.cruise_date,
            "adultos": self.adults,
            "ninos": self.children,
            "urgencia": self.purchase_urgency,
        }

    def build_note(self) -> str:
        lines = ["Datos del lead:"]
        if self.destination:
            lines.append(f"- Destino crucero: {self.destination}")
        if self.cruise_date:
            lines.append(f"- Fecha crucero: {self.cruise_date}")
        if self.adults:
            lines.append(f"- Adultos: {self.adults}")
        if self.children:
            lines.append(f"- Niños: {self.children}")
        if self.purchase_urgency:
            lines.append(f"- Urgencia de compra: {self.purchase_urgency}")
        if self.summary:
            lines.append(f"- Resumen: {self.summary}")
        return "\n".join(lines) + "\n"
