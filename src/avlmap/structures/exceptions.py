class AVLTreeError(Exception):
    """Erro base das operações da Árvore AVL."""


class DuplicateKeyError(AVLTreeError, KeyError):
    """Inserção de uma chave que já existe. A árvore não é alterada."""
    def __init__(self, key: int):
        super().__init__(f"Chave duplicada: {key}")
        self.key = key


class KeyNotFoundError(AVLTreeError, KeyError):
    """Remoção de uma chave ausente. A árvore não é alterada."""
    def __init__(self, key: int):
        super().__init__(f"Chave não encontrada: {key}")
        self.key = key


class PreconditionViolatedError(AVLTreeError, ValueError):
    """Uso indevido de split/join (chave ausente, intervalos sobrepostos)."""


class RankInvariantError(AVLTreeError, RuntimeError):
    """Par de diferenças de rank impossível numa árvore válida."""
