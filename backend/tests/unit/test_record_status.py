"""Unit tests for the RecordStatus lifecycle graph."""

import itertools

import pytest

from unarchiving.domain.entities import RecordStatus
from unarchiving.domain.exceptions import InvalidStatusError

S = RecordStatus

LEGAL_EDGES = {
    (S.SOLICITADO, S.DESARQUIVADO),
    (S.SOLICITADO, S.NAO_LOCALIZADO),
    (S.DESARQUIVADO, S.RETIRADO_PELO_SETOR),
    (S.DESARQUIVADO, S.NAO_COLETADO),
    (S.DESARQUIVADO, S.REARQUIVAMENTO_SOLICITADO),
    (S.RETIRADO_PELO_SETOR, S.FINALIZADO),
    (S.NAO_COLETADO, S.REARQUIVAMENTO_SOLICITADO),
    (S.REARQUIVAMENTO_SOLICITADO, S.FINALIZADO),
}


@pytest.mark.parametrize(
    "source,target",
    list(itertools.product(RecordStatus, repeat=2)),
    ids=lambda s: s.value,
)
def test_can_transition_to_matches_table(source: RecordStatus, target: RecordStatus):
    assert source.can_transition_to(target) is ((source, target) in LEGAL_EDGES)


def test_every_pair_is_covered():
    assert len(list(itertools.product(RecordStatus, repeat=2))) == 49


def test_valid_transitions_lists_outgoing_edges():
    assert S.DESARQUIVADO.valid_transitions() == {
        S.RETIRADO_PELO_SETOR,
        S.NAO_COLETADO,
        S.REARQUIVAMENTO_SOLICITADO,
    }
    assert S.FINALIZADO.valid_transitions() == frozenset()


@pytest.mark.parametrize("status", list(RecordStatus), ids=lambda s: s.value)
def test_classification_predicates(status: RecordStatus):
    assert status.is_final() is (status in {S.FINALIZADO, S.NAO_LOCALIZADO})
    assert status.is_finalized() is (status is S.FINALIZADO)
    assert status.is_pending() is (status is S.SOLICITADO)
    assert status.is_in_progress() is (
        status in {S.DESARQUIVADO, S.RETIRADO_PELO_SETOR, S.REARQUIVAMENTO_SOLICITADO}
    )
    assert status.can_be_completed() is (
        status in {S.RETIRADO_PELO_SETOR, S.REARQUIVAMENTO_SOLICITADO}
    )


def test_terminal_states_have_no_way_out():
    for status in (S.FINALIZADO, S.NAO_LOCALIZADO):
        assert not any(status.can_transition_to(target) for target in RecordStatus)


@pytest.mark.parametrize("raw", ["desarquivado", "  DESARQUIVADO ", "Desarquivado"])
def test_parse_normalizes_case_and_whitespace(raw: str):
    assert RecordStatus.parse(raw) is S.DESARQUIVADO


@pytest.mark.parametrize("raw", ["BOGUS", "", "   ", None, "CANCELADO", 3])
def test_parse_rejects_unknown_tokens(raw):
    with pytest.raises(InvalidStatusError):
        RecordStatus.parse(raw)


def test_parse_returns_members_unchanged():
    assert RecordStatus.parse(S.NAO_COLETADO) is S.NAO_COLETADO


def test_every_status_has_a_description():
    for status in RecordStatus:
        assert status.description
    assert S.NAO_LOCALIZADO.description == "Documento não localizado"
