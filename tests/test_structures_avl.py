import sys
import os
import random

# Setup de importação
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.avlmap.structures.avl_tree import AVLTree
from src.avlmap.structures.exceptions import DuplicateKeyError
from src.avlmap.analysis.invariants import validate_tree


def test_avl_balancing():
    print("--- Iniciando Teste de Balanceamento da AVL ---")

    avl = AVLTree()

    # Cenário: Inserção sequencial que desbalancearia uma árvore comum
    ids_to_insert = [10, 20, 30, 40, 50, 25]
    print(f"Inserindo chaves na ordem: {ids_to_insert}")
    for key in ids_to_insert:
        avl.insert(key, f"no-{key}")

    # A raiz não deve ser 10 (primeira inserção): a árvore girou para balancear
    print(f"Raiz após balanceamento: {avl.root.key}")
    assert avl.root.key == 30, f"Raiz inesperada: {avl.root.key}"
    assert avl.root.height == 2, f"Altura inesperada: {avl.root.height}"
    assert validate_tree(avl) == []

    assert avl.search(40) == "no-40"
    assert avl.search(35) is None
    print(">> SUCESSO: Altura controlada e busca correta.")


def test_concrete_scenario():
    print("--- Cenário [5,3,8,1,4,7,9] ---")
    avl = AVLTree()
    for key in [5, 3, 8, 1, 4, 7, 9]:
        avl.insert(key, f"v{key}")

    assert avl.keys_in_order() == [1, 3, 4, 5, 7, 8, 9]
    assert avl.values_in_order() == ["v1", "v3", "v4", "v5", "v7", "v8", "v9"]
    assert avl.min() == "v1"
    assert avl.max() == "v9"
    assert avl.size() == 7

    avl.delete(5)

    # O sucessor (7) ocupa o lugar do nó binário removido
    assert avl.root.key == 7, f"Raiz após remoção: {avl.root.key}"
    assert avl.root.rank == 2
    assert avl.size() == 6
    assert avl.keys_in_order() == [1, 3, 4, 7, 8, 9]
    assert validate_tree(avl) == []
    print(">> SUCESSO: Sucessor promovido sem violar o balanceamento.")


def test_insert_rebalancing_counts():
    avl = AVLTree()
    assert avl.insert(1, "a") == 0   # Raiz
    assert avl.insert(2, "b") == 1   # Promove 1
    assert avl.insert(3, "c") == 3   # Promove 2, rotação simples em 1

    assert avl.root.key == 2
    assert avl.keys_in_order() == [1, 2, 3]

    zigzag = AVLTree()
    zigzag.insert(3, "c")
    zigzag.insert(1, "a")
    # Promove 1, depois rotação dupla (2 + 2)
    assert zigzag.insert(2, "b") == 5
    assert zigzag.root.key == 2
    assert validate_tree(zigzag) == []


def test_duplicate_key_leaves_tree_unchanged():
    avl = AVLTree()
    for key in [8, 4, 12, 2, 6]:
        avl.insert(key, key * 10)
    before = avl.keys_in_order()

    try:
        avl.insert(6, "outro")
        assert False, "Deveria lançar DuplicateKeyError"
    except DuplicateKeyError as e:
        print(f"Erro esperado: {e}")

    assert avl.keys_in_order() == before
    assert avl.search(6) == 60, "O valor original não pode ser sobrescrito"
    assert avl.size() == 5


def test_empty_tree_queries():
    avl = AVLTree()
    assert avl.empty()
    assert avl.size() == 0
    assert avl.min() is None
    assert avl.max() is None
    assert avl.search(1) is None
    assert avl.keys_in_order() == []
    assert avl.values_in_order() == []


def test_random_inserts_keep_invariants():
    rng = random.Random(7)
    keys = rng.sample(range(10000), 800)
    avl = AVLTree()
    for i, key in enumerate(keys):
        avl.insert(key, str(key))
        if i % 100 == 0:
            assert validate_tree(avl) == []

    assert avl.keys_in_order() == sorted(keys)
    assert avl.size() == len(keys)
    assert avl.min() == str(min(keys))
    assert avl.max() == str(max(keys))
    assert validate_tree(avl) == []

    # Em AVL, rank coincide com a altura e ambos são O(log n)
    assert avl.root.rank == avl.root.height
    assert avl.root.height <= 1.45 * (len(keys).bit_length() + 1)


def test_successor_and_extremes():
    avl = AVLTree()
    for key in [50, 30, 70, 20, 40, 60, 80]:
        avl.insert(key, key)

    node_40 = avl._find_node(40)
    assert AVLTree.successor(node_40).key == 50
    assert AVLTree.successor(avl._find_node(50)).key == 60
    assert AVLTree.successor(avl.max_node) is None
    assert AVLTree.tree_min(avl.root).key == 20
    assert AVLTree.tree_max(avl.root).key == 80


if __name__ == "__main__":
    test_avl_balancing()
    test_concrete_scenario()
    test_insert_rebalancing_counts()
    test_duplicate_key_leaves_tree_unchanged()
    test_empty_tree_queries()
    test_random_inserts_keep_invariants()
    test_successor_and_extremes()
