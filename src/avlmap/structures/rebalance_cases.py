from typing import Dict, Optional, Tuple

from src.avlmap.structures.exceptions import RankInvariantError

RankPair = Tuple[int, int]


class RebalanceCase:
    """
    Casos de rebalanceamento.
    Cada caso é decidido apenas pelos pares (diferença esquerda, diferença direita),
    sem tocar na árvore.
    """
    BALANCED = "BALANCEADO"
    PROMOTE = "PROMOCAO"
    DEMOTE = "REBAIXAMENTO"
    SINGLE_ROTATION = "ROTACAO_SIMPLES"
    DOUBLE_ROTATION = "ROTACAO_DUPLA"
    ROTATE_AND_PROMOTE = "ROTACAO_COM_PROMOCAO"   # Só ocorre no join
    ROTATE_AND_DEMOTE = "ROTACAO_COM_REBAIXAMENTO"


BALANCED_PAIRS = {(1, 1), (1, 2), (2, 1)}

# Modelo de custo: promoção/rebaixamento = 1, cada rotação = 2
CASE_COST: Dict[str, int] = {
    RebalanceCase.BALANCED: 0,
    RebalanceCase.PROMOTE: 1,
    RebalanceCase.DEMOTE: 1,
    RebalanceCase.SINGLE_ROTATION: 2,
    RebalanceCase.DOUBLE_ROTATION: 4,
    RebalanceCase.ROTATE_AND_PROMOTE: 2,
    RebalanceCase.ROTATE_AND_DEMOTE: 2,
}


def is_balanced(diffs: RankPair) -> bool:
    return diffs in BALANCED_PAIRS


def _outer_inner(child_diffs: RankPair, child_is_left: bool) -> RankPair:
    """Reordena as diferenças do filho como (lado externo, lado interno)."""
    if child_is_left:
        return child_diffs[0], child_diffs[1]
    return child_diffs[1], child_diffs[0]


def classify_insert(parent_diffs: RankPair, child_diffs: Optional[RankPair]) -> str:
    """
    Decide o passo de subida após inserção (ou join).
    parent_diffs: diferenças do ancestral examinado.
    child_diffs: diferenças do filho pelo qual a subida chegou (lado com diferença 0).
    """
    if is_balanced(parent_diffs):
        return RebalanceCase.BALANCED

    left, right = parent_diffs
    if left == 0 and right in (1, 2):
        child_is_left, other = True, right
    elif right == 0 and left in (1, 2):
        child_is_left, other = False, left
    else:
        raise RankInvariantError(f"Par inválido após inserção: {parent_diffs}")

    if other == 1:
        return RebalanceCase.PROMOTE

    if child_diffs is None:
        raise RankInvariantError(f"Rotação sem filho no par {parent_diffs}")

    outer, inner = _outer_inner(child_diffs, child_is_left)
    if (outer, inner) == (1, 2):
        return RebalanceCase.SINGLE_ROTATION
    if (outer, inner) == (2, 1):
        return RebalanceCase.DOUBLE_ROTATION
    if (outer, inner) == (1, 1):
        return RebalanceCase.ROTATE_AND_PROMOTE
    raise RankInvariantError(f"Filho inválido {child_diffs} sob o par {parent_diffs}")


def classify_delete(node_diffs: RankPair, sibling_diffs: Optional[RankPair]) -> str:
    """
    Decide o passo de subida após remoção.
    sibling_diffs: diferenças do filho do lado oposto ao da remoção
    (só consultado nos casos 3,1 e 1,3).
    """
    if is_balanced(node_diffs):
        return RebalanceCase.BALANCED
    if node_diffs == (2, 2):
        return RebalanceCase.DEMOTE

    if node_diffs == (3, 1):
        sibling_is_left = False
    elif node_diffs == (1, 3):
        sibling_is_left = True
    else:
        raise RankInvariantError(f"Par inválido após remoção: {node_diffs}")

    if sibling_diffs is None:
        raise RankInvariantError(f"Par {node_diffs} sem irmão real")

    outer, inner = _outer_inner(sibling_diffs, sibling_is_left)
    if (outer, inner) == (1, 1):
        return RebalanceCase.SINGLE_ROTATION
    if (outer, inner) == (1, 2):
        return RebalanceCase.ROTATE_AND_DEMOTE
    if (outer, inner) == (2, 1):
        return RebalanceCase.DOUBLE_ROTATION
    raise RankInvariantError(f"Irmão inválido {sibling_diffs} sob o par {node_diffs}")
