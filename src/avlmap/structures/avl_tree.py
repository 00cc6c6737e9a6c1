from typing import Any, List, Optional, Tuple

from src.avlmap.structures.avl_node import AVLNode, rank_of, rank_differences
from src.avlmap.structures.exceptions import (
    DuplicateKeyError,
    KeyNotFoundError,
    PreconditionViolatedError,
)
from src.avlmap.structures.rebalance_cases import (
    CASE_COST,
    RebalanceCase,
    classify_delete,
    classify_insert,
)


class AVLTree:
    """
    Mapa ordenado de chaves inteiras sobre uma Árvore AVL por ranks.
    Busca, inserção e remoção em O(log n); split e join com custo
    proporcional à diferença de rank das subárvores envolvidas.

    Os métodos que alteram a árvore devolvem o número de operações de
    rebalanceamento (promoção/rebaixamento = 1, cada rotação = 2).
    """
    def __init__(self):
        self.root: Optional[AVLNode] = None
        self.min_node: Optional[AVLNode] = None
        self.max_node: Optional[AVLNode] = None

    # --- Consultas ---

    def empty(self) -> bool:
        return self.root is None

    def size(self) -> int:
        """Número de nós, lido do cache da raiz em O(1)."""
        return self.root.size if self.root else 0

    def min(self) -> Any:
        return self.min_node.value if self.min_node else None

    def max(self) -> Any:
        return self.max_node.value if self.max_node else None

    def search(self, key: int) -> Any:
        """Busca um valor pela chave em O(log n). Retorna None se ausente."""
        node = self._find_node(key)
        return node.value if node else None

    def keys_in_order(self) -> List[int]:
        """Retorna todas as chaves em ordem crescente (in-order traversal)."""
        return [node.key for node in self._nodes_in_order()]

    def values_in_order(self) -> List[Any]:
        """Retorna os valores ordenados pelas respectivas chaves."""
        return [node.value for node in self._nodes_in_order()]

    def _nodes_in_order(self) -> List[AVLNode]:
        nodes: List[AVLNode] = []
        self._in_order(self.root, nodes)
        return nodes

    def _in_order(self, node, nodes):
        if node:
            self._in_order(node.left, nodes)
            nodes.append(node)
            self._in_order(node.right, nodes)

    def _find_node(self, key: int) -> Optional[AVLNode]:
        current = self.root
        while current:
            if key == current.key:
                return current
            elif key < current.key:
                current = current.left
            else:
                current = current.right
        return None

    def _tree_position(self, key: int) -> AVLNode:
        """
        Último nó real no caminho de busca por 'key'.
        Se a chave já existe, retorna o próprio nó. Pré-condição: árvore não vazia.
        """
        position = self.root
        current = self.root
        while current:
            position = current
            if key == current.key:
                break
            current = current.left if key < current.key else current.right
        return position

    @staticmethod
    def tree_min(node: AVLNode) -> AVLNode:
        while node.left:
            node = node.left
        return node

    @staticmethod
    def tree_max(node: AVLNode) -> AVLNode:
        while node.right:
            node = node.right
        return node

    @staticmethod
    def successor(node: AVLNode) -> Optional[AVLNode]:
        """
        Nó com a menor chave maior que a de 'node'.
        Com filho direito é o mínimo da subárvore direita; sem ele, sobe até
        a primeira curva à direita.
        """
        if node.right:
            return AVLTree.tree_min(node.right)
        parent = node.parent
        while parent is not None and node is parent.right:
            node = parent
            parent = node.parent
        return parent

    def _reset_extremes(self):
        if self.root is None:
            self.min_node = self.max_node = None
        else:
            self.min_node = self.tree_min(self.root)
            self.max_node = self.tree_max(self.root)

    # --- Ligações e rotações ---

    @staticmethod
    def _set_left(node: AVLNode, child: Optional[AVLNode]):
        node.left = child
        if child is not None:
            child.parent = node

    @staticmethod
    def _set_right(node: AVLNode, child: Optional[AVLNode]):
        node.right = child
        if child is not None:
            child.parent = node

    def _replace_child(self, parent: Optional[AVLNode], old: AVLNode, new: Optional[AVLNode]):
        """Coloca 'new' na posição que 'old' ocupa sob 'parent' (ou na raiz)."""
        if parent is None:
            self.root = new
            if new is not None:
                new.parent = None
        elif parent.left is old:
            self._set_left(parent, new)
        else:
            self._set_right(parent, new)

    def _rotate_left(self, z: AVLNode) -> AVLNode:
        """
        Realiza rotação simples à esquerda.
        O filho direito de z sobe; ranks não são alterados aqui.
        """
        y = z.right
        self._replace_child(z.parent, z, y)
        self._set_right(z, y.left)
        self._set_left(y, z)

        # Atualiza tamanhos e alturas
        z.update()
        y.update()
        return y

    def _rotate_right(self, z: AVLNode) -> AVLNode:
        """Realiza rotação simples à direita (espelho de _rotate_left)."""
        y = z.left
        self._replace_child(z.parent, z, y)
        self._set_left(z, y.right)
        self._set_right(y, z)

        z.update()
        y.update()
        return y

    def _rotate_up(self, node: AVLNode):
        """Gira 'node' para cima, trocando de lugar com o pai."""
        if node.is_left_child():
            self._rotate_right(node.parent)
        else:
            self._rotate_left(node.parent)

    @staticmethod
    def _update_path(node: Optional[AVLNode]):
        """Recalcula tamanho e altura de 'node' até a raiz."""
        while node is not None:
            node.update()
            node = node.parent

    # --- Inserção ---

    def insert(self, key: int, value: Any) -> int:
        """
        Insere um par chave/valor e rebalanceia a árvore.
        Retorna o número de operações de rebalanceamento.
        Lança DuplicateKeyError se a chave já existe (sem alterar a árvore).
        """
        if self.root is None:
            node = AVLNode(key, value)
            self.root = self.min_node = self.max_node = node
            return 0

        position = self._tree_position(key)
        if position.key == key:
            raise DuplicateKeyError(key)

        node = AVLNode(key, value)
        if key < position.key:
            self._set_left(position, node)
        else:
            self._set_right(position, node)

        operations = self._rebalance_upward(node)
        self._update_path(node)

        if key < self.min_node.key:
            self.min_node = node
        if key > self.max_node.key:
            self.max_node = node
        return operations

    def _rebalance_upward(self, node: AVLNode) -> int:
        """
        Subida de rebalanceamento após inserção ou join.
        'node' é o nó cujo rank acabou de crescer em relação ao pai.
        Promove enquanto possível; uma rotação simples ou dupla encerra a subida.
        """
        operations = 0
        while node.parent is not None:
            parent = node.parent
            case = classify_insert(rank_differences(parent), rank_differences(node))
            operations += CASE_COST[case]

            if case == RebalanceCase.BALANCED:
                break

            if case == RebalanceCase.PROMOTE:
                parent.rank += 1
                node = parent

            elif case == RebalanceCase.SINGLE_ROTATION:
                self._rotate_up(node)
                parent.rank -= 1
                break

            elif case == RebalanceCase.DOUBLE_ROTATION:
                inner = node.right if node.is_left_child() else node.left
                self._rotate_up(inner)
                self._rotate_up(inner)
                node.rank -= 1
                parent.rank -= 1
                inner.rank += 1
                break

            else:
                # ROTATE_AND_PROMOTE: filho 1,1 vindo do join; o nó sobe um rank
                # e a subida continua a partir dele.
                self._rotate_up(node)
                node.rank += 1

        return operations

    # --- Remoção ---

    def delete(self, key: int) -> int:
        """
        Remove o item com a chave 'key'.
        Retorna o número de operações de rebalanceamento.
        Lança KeyNotFoundError se a chave não existe (sem alterar a árvore).
        """
        target = self._find_node(key)
        if target is None:
            raise KeyNotFoundError(key)

        # Nó binário: troca estrutural com o sucessor, depois fica com no máximo um filho
        if target.is_binary():
            self._swap_with_successor(target)

        parent = target.parent
        child = target.left if target.left is not None else target.right
        self._replace_child(parent, target, child)
        target.parent = target.left = target.right = None

        operations = 0
        if parent is not None:
            operations = self._rebalance_after_delete(parent)
            self._update_path(parent)

        if self.root is None:
            self.min_node = self.max_node = None
        else:
            if target is self.min_node:
                self.min_node = self.tree_min(self.root)
            if target is self.max_node:
                self.max_node = self.tree_max(self.root)
        return operations

    def _swap_with_successor(self, target: AVLNode):
        """
        Troca 'target' de posição com o sucessor, religando todos os ponteiros.
        Rank, tamanho e altura acompanham a posição, não o nó.
        """
        successor = self.tree_min(target.right)
        successor_parent = successor.parent
        successor_right = successor.right
        left = target.left
        right = target.right

        self._replace_child(target.parent, target, successor)
        self._set_left(successor, left)
        if successor is right:
            self._set_right(successor, target)
        else:
            self._set_right(successor, right)
            self._set_left(successor_parent, target)

        target.left = None
        self._set_right(target, successor_right)

        target.rank, successor.rank = successor.rank, target.rank
        target.size, successor.size = successor.size, target.size
        target.height, successor.height = successor.height, target.height

    def _rebalance_after_delete(self, node: AVLNode) -> int:
        """
        Subida de rebalanceamento após remoção, a partir do antigo pai.
        2,2 rebaixa e sobe (único caso que pode se repetir O(log n) vezes);
        3,1 e 1,3 rotacionam conforme as diferenças do irmão.
        """
        operations = 0
        while node is not None:
            diffs = rank_differences(node)
            if diffs == (3, 1):
                sibling = node.right
            elif diffs == (1, 3):
                sibling = node.left
            else:
                sibling = None
            sibling_diffs = rank_differences(sibling) if sibling is not None else None

            case = classify_delete(diffs, sibling_diffs)
            operations += CASE_COST[case]

            if case == RebalanceCase.BALANCED:
                break

            if case == RebalanceCase.DEMOTE:
                node.rank -= 1
                node = node.parent

            elif case == RebalanceCase.SINGLE_ROTATION:
                # O irmão ocupa o rank antigo do nó: nada muda acima
                self._rotate_up(sibling)
                node.rank -= 1
                sibling.rank += 1
                break

            elif case == RebalanceCase.ROTATE_AND_DEMOTE:
                self._rotate_up(sibling)
                node.rank -= 2
                node = sibling.parent

            else:
                inner = sibling.left if sibling is node.right else sibling.right
                self._rotate_up(inner)
                self._rotate_up(inner)
                node.rank -= 2
                sibling.rank -= 1
                inner.rank += 1
                node = inner.parent

        return operations

    # --- Join e Split ---

    def join(self, key: int, value: Any, other: "AVLTree") -> int:
        """
        Une esta árvore, o separador (key, value) e 'other'.
        Pré-condição: todas as chaves de uma árvore < key < todas as chaves da outra.
        Esta árvore passa a conter o resultado; 'other' fica vazia.
        Retorna |rank(self) - rank(other)| + 1 (árvore vazia tem rank -1).
        """
        if other is self:
            raise PreconditionViolatedError("Join de uma árvore consigo mesma")

        other_on_left = self._join_side(key, other)
        left_tree, right_tree = (other, self) if other_on_left else (self, other)
        new_min = left_tree.min_node
        new_max = right_tree.max_node

        separator = AVLNode(key, value)
        cost = self._join_nodes(left_tree.root, separator, right_tree.root)

        other.root = other.min_node = other.max_node = None
        self.min_node = new_min if new_min is not None else separator
        self.max_node = new_max if new_max is not None else separator
        return cost

    def _join_side(self, key: int, other: "AVLTree") -> bool:
        """True se 'other' fica à esquerda do separador. Valida a pré-condição."""
        other_below = other.empty() or other.max_node.key < key
        other_above = other.empty() or key < other.min_node.key
        self_below = self.empty() or self.max_node.key < key
        self_above = self.empty() or key < self.min_node.key

        if other_below and self_above:
            return True
        if self_below and other_above:
            return False
        raise PreconditionViolatedError(
            f"Join inválido: o separador {key} não divide as chaves das duas árvores"
        )

    def _join_nodes(self, left_root: Optional[AVLNode], x: AVLNode,
                    right_root: Optional[AVLNode]) -> int:
        """
        Liga left_root < x < right_root e deixa o resultado em self.root.
        Desce pela borda da árvore mais alta voltada para a mais baixa até uma
        subárvore de rank <= rank(baixa) + 1 e encaixa x ali.
        """
        rank_left, rank_right = rank_of(left_root), rank_of(right_root)
        cost = abs(rank_left - rank_right) + 1

        for root in (left_root, right_root):
            if root is not None:
                root.parent = None

        if rank_left >= rank_right:
            parent, current = None, left_root
            while rank_of(current) > rank_right + 1:
                parent, current = current, current.right
            self._set_left(x, current)
            self._set_right(x, right_root)
            if parent is None:
                self.root = x
            else:
                self.root = left_root
                self._set_right(parent, x)
        else:
            parent, current = None, right_root
            while rank_of(current) > rank_left + 1:
                parent, current = current, current.left
            self._set_right(x, current)
            self._set_left(x, left_root)
            if parent is None:
                self.root = x
            else:
                self.root = right_root
                self._set_left(parent, x)

        x.rank = max(rank_of(x.left), rank_of(x.right)) + 1
        x.update()
        self._rebalance_upward(x)
        self._update_path(x)
        return cost

    def split(self, key: int) -> Tuple["AVLTree", "AVLTree"]:
        """
        Divide a árvore em (menores, maiores) em relação a 'key'.
        Pré-condição: 'key' está na árvore, senão PreconditionViolatedError.
        Os nós são transferidos para as novas árvores e esta fica vazia.
        """
        node = self._find_node(key)
        if node is None:
            raise PreconditionViolatedError(f"Split por chave ausente: {key}")

        lesser = AVLTree()
        greater = AVLTree()
        lesser.root = node.left
        greater.root = node.right
        if node.left is not None:
            node.left.parent = None
        if node.right is not None:
            node.right.parent = None

        current = node
        parent = node.parent
        while parent is not None:
            grandparent = parent.parent
            separator = AVLNode(parent.key, parent.value)
            if parent.right is current:
                # O pai e sua subárvore esquerda são menores que 'key'
                lesser._join_nodes(parent.left, separator, lesser.root)
            else:
                greater._join_nodes(greater.root, separator, parent.right)
            current, parent = parent, grandparent

        self.root = self.min_node = self.max_node = None
        lesser._reset_extremes()
        greater._reset_extremes()
        return lesser, greater

    def __repr__(self):
        if self.root is None:
            return "AVLTree(vazia)"
        return (f"AVLTree(size={self.size()}, min={self.min_node.key}, "
                f"max={self.max_node.key}, rank={self.root.rank})")
