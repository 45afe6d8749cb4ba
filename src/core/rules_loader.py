"""Carga de la lista local de reglas de detección.

Formato:
- Texto plano, un patrón por línea (regex o literal).
- Las líneas en blanco se ignoran; el `\\r` final (CRLF) se descarta.

La carga es falible pero nunca fatal: ante un error devuelve lista vacía y un
`RuleListWarning` observable por el llamador (además de registrarlo en log).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from core.domain.models import DetectRule

logger = logging.getLogger(__name__)

LOCAL_RULE_ID = -1


@dataclass(frozen=True)
class RuleListWarning:
    """Condición degradada al leer el fichero de reglas."""

    path: Path
    reason: str


@dataclass(frozen=True)
class RuleListLoad:
    """Resultado de la carga: reglas (quizá vacías) + aviso opcional."""

    rules: tuple[DetectRule, ...] = ()
    warning: RuleListWarning | None = None

    @property
    def degraded(self) -> bool:
        return self.warning is not None


def parse_rule_lines(text: str) -> tuple[DetectRule, ...]:
    return tuple(
        DetectRule(id=LOCAL_RULE_ID, pattern=line.rstrip("\r"))
        for line in text.split("\n")
        if line.strip()
    )


def load_local_rules(path: Path | str | None) -> RuleListLoad:
    """Lee el fichero de reglas locales.

    Reglas:
    - Sin ruta configurada -> lista vacía, sin aviso.
    - Fichero ausente/ilegible/no UTF-8 -> lista vacía + aviso (nunca excepción).
    """

    if path is None or str(path).strip() == "":
        return RuleListLoad()

    rule_path = Path(path)
    try:
        text = rule_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Error when reading local rule list %s: %s", rule_path, exc)
        return RuleListLoad(warning=RuleListWarning(path=rule_path, reason=str(exc)))

    rules = parse_rule_lines(text)
    logger.debug("Loaded %d local rules from %s", len(rules), rule_path)
    return RuleListLoad(rules=rules)
