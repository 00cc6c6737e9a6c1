from typing import List

from src.avlmap.structures.avl_node import height_of, rank_differences, size_of
from src.avlmap.structures.avl_tree import AVLTree
from src.avlmap.structures.exceptions import RankInvariantError
from src.avlmap.structures.rebalance_cases import is_balanced


def validate_tree(tree: AVLTree) -> List[str]:
    """
    Verifica todas as invariantes estruturais da árvore em O(n).
    Retorna a lista de violações encontradas (vazia se a árvore é válida):
    - ordem de BST
    - diferenças de rank em {1,2} e não ambas 2
    - caches de tamanho e altura
    - ponteiros de pai
    - min/max apontando para os nós extremos
    """
    errors: List[str] = []

    if tree.root is None:
        if tree.min_node is not None or tree.max_node is not None:
            errors.append("Árvore vazia com min/max definidos")
        return errors

    if tree.root.parent is not None:
        errors.append(f"Raiz {tree.root.key} com pai definido")

    # Pilha explícita: (nó, limite inferior, limite superior)
    stack = [(tree.root, None, None)]
    while stack:
        node, low, high = stack.pop()

        if (low is not None and node.key <= low) or (high is not None and node.key >= high):
            errors.append(f"Ordem violada no nó {node.key} (limites {low}, {high})")

        diffs = rank_differences(node)
        if not is_balanced(diffs):
            errors.append(f"Nó {node.key} desbalanceado: diferenças {diffs}")

        expected_size = size_of(node.left) + size_of(node.right) + 1
        if node.size != expected_size:
            errors.append(f"Nó {node.key}: size {node.size} != {expected_size}")

        expected_height = max(height_of(node.left), height_of(node.right)) + 1
        if node.height != expected_height:
            errors.append(f"Nó {node.key}: height {node.height} != {expected_height}")

        for child in (node.left, node.right):
            if child is not None and child.parent is not node:
                errors.append(f"Filho {child.key} não aponta para o pai {node.key}")

        if node.left is not None:
            stack.append((node.left, low, node.key))
        if node.right is not None:
            stack.append((node.right, node.key, high))

    if tree.min_node is not AVLTree.tree_min(tree.root):
        errors.append("min_node não é o nó de menor chave")
    if tree.max_node is not AVLTree.tree_max(tree.root):
        errors.append("max_node não é o nó de maior chave")

    return errors


def assert_valid(tree: AVLTree):
    """Lança RankInvariantError com as primeiras violações encontradas."""
    errors = validate_tree(tree)
    if errors:
        raise RankInvariantError("; ".join(errors[:5]))
