from typing import Any, Optional, Tuple


class AVLNode:
    """
    Nó interno da Árvore AVL por ranks.
    Armazena a chave, o valor, o rank de balanceamento e os caches de
    altura e tamanho da subárvore.

    Filho ausente é representado por None; rank_of/height_of/size_of
    devolvem os valores de um "nó virtual" (-1, -1, 0).
    """
    def __init__(self, key: int, value: Any, parent: Optional["AVLNode"] = None):
        self.key = key
        self.value = value
        self.rank = 0
        self.height = 0
        self.size = 1
        self.left: Optional["AVLNode"] = None
        self.right: Optional["AVLNode"] = None
        self.parent = parent    # Referência de volta, nunca dona do pai

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def is_unary(self) -> bool:
        return (self.left is None) != (self.right is None)

    def is_binary(self) -> bool:
        return self.left is not None and self.right is not None

    def is_left_child(self) -> bool:
        return self.parent is not None and self.parent.left is self

    def update(self):
        """Recalcula tamanho e altura a partir dos filhos (O(1))."""
        self.size = size_of(self.left) + size_of(self.right) + 1
        self.height = max(height_of(self.left), height_of(self.right)) + 1

    def __repr__(self):
        return f"AVLNode(key={self.key}, rank={self.rank}, size={self.size})"


def rank_of(node: Optional[AVLNode]) -> int:
    return node.rank if node is not None else -1


def height_of(node: Optional[AVLNode]) -> int:
    return node.height if node is not None else -1


def size_of(node: Optional[AVLNode]) -> int:
    return node.size if node is not None else 0


def rank_differences(node: AVLNode) -> Tuple[int, int]:
    """Retorna (rank(nó) - rank(esquerdo), rank(nó) - rank(direito))."""
    return node.rank - rank_of(node.left), node.rank - rank_of(node.right)
