"""Lifecycle states of an unarchiving record and the legal transitions between them."""

from enum import Enum

from unarchiving.domain.exceptions import InvalidStatusError


class RecordStatus(str, Enum):
    """The seven lifecycle states of an unarchiving request.

    Values are the tokens persisted in storage, so they stay in Portuguese.
    """

    SOLICITADO = "SOLICITADO"
    DESARQUIVADO = "DESARQUIVADO"
    RETIRADO_PELO_SETOR = "RETIRADO_PELO_SETOR"
    NAO_COLETADO = "NAO_COLETADO"
    REARQUIVAMENTO_SOLICITADO = "REARQUIVAMENTO_SOLICITADO"
    FINALIZADO = "FINALIZADO"
    NAO_LOCALIZADO = "NAO_LOCALIZADO"

    @classmethod
    def parse(cls, raw: "str | RecordStatus | None") -> "RecordStatus":
        """Resolve a status token, tolerating case and surrounding whitespace.

        Raises:
            InvalidStatusError: for ``None``, blank or unrecognized tokens.
        """
        if isinstance(raw, RecordStatus):
            return raw
        if not isinstance(raw, str) or not raw.strip():
            raise InvalidStatusError(raw)
        try:
            return cls(raw.strip().upper())
        except ValueError:
            raise InvalidStatusError(raw) from None

    def valid_transitions(self) -> frozenset["RecordStatus"]:
        return _TRANSITIONS[self]

    def can_transition_to(self, target: "RecordStatus") -> bool:
        return target in _TRANSITIONS[self]

    def is_final(self) -> bool:
        return self in _FINAL

    def is_finalized(self) -> bool:
        return self is RecordStatus.FINALIZADO

    def is_pending(self) -> bool:
        return self is RecordStatus.SOLICITADO

    def is_in_progress(self) -> bool:
        return self in _IN_PROGRESS

    def can_be_completed(self) -> bool:
        return self.can_transition_to(RecordStatus.FINALIZADO)

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_TRANSITIONS: dict[RecordStatus, frozenset[RecordStatus]] = {
    RecordStatus.SOLICITADO: frozenset({
        RecordStatus.DESARQUIVADO,
        RecordStatus.NAO_LOCALIZADO,
    }),
    RecordStatus.DESARQUIVADO: frozenset({
        RecordStatus.RETIRADO_PELO_SETOR,
        RecordStatus.NAO_COLETADO,
        RecordStatus.REARQUIVAMENTO_SOLICITADO,
    }),
    RecordStatus.RETIRADO_PELO_SETOR: frozenset({RecordStatus.FINALIZADO}),
    RecordStatus.NAO_COLETADO: frozenset({RecordStatus.REARQUIVAMENTO_SOLICITADO}),
    RecordStatus.REARQUIVAMENTO_SOLICITADO: frozenset({RecordStatus.FINALIZADO}),
    RecordStatus.FINALIZADO: frozenset(),
    RecordStatus.NAO_LOCALIZADO: frozenset(),
}

_FINAL = frozenset({RecordStatus.FINALIZADO, RecordStatus.NAO_LOCALIZADO})

_IN_PROGRESS = frozenset({
    RecordStatus.DESARQUIVADO,
    RecordStatus.RETIRADO_PELO_SETOR,
    RecordStatus.REARQUIVAMENTO_SOLICITADO,
})

_DESCRIPTIONS: dict[RecordStatus, str] = {
    RecordStatus.SOLICITADO: "Aguardando desarquivamento",
    RecordStatus.DESARQUIVADO: "Desarquivado e disponível",
    RecordStatus.RETIRADO_PELO_SETOR: "Retirado pelo setor solicitante",
    RecordStatus.NAO_COLETADO: "Não coletado pelo setor",
    RecordStatus.REARQUIVAMENTO_SOLICITADO: "Rearquivamento solicitado",
    RecordStatus.FINALIZADO: "Processo finalizado",
    RecordStatus.NAO_LOCALIZADO: "Documento não localizado",
}
