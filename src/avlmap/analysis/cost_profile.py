import os
import random
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import matplotlib.pyplot as plt

from src.avlmap.analysis.invariants import assert_valid
from src.avlmap.structures.avl_node import rank_of
from src.avlmap.structures.avl_tree import AVLTree


class OperationType:
    INSERT = "INSERCAO"
    DELETE = "REMOCAO"
    JOIN = "JOIN"


@dataclass
class OperationStats:
    """Custos de rebalanceamento de um tipo de operação para um tamanho n."""
    operation: str
    size: int
    costs: np.ndarray
    elapsed_ms: float
    bounds: Optional[np.ndarray] = field(default=None)  # Limite declarado (só join)

    @property
    def mean(self) -> float:
        return float(np.mean(self.costs)) if self.costs.size else 0.0

    @property
    def max(self) -> int:
        return int(np.max(self.costs)) if self.costs.size else 0

    @property
    def p95(self) -> float:
        return float(np.percentile(self.costs, 95)) if self.costs.size else 0.0

    @property
    def total(self) -> int:
        return int(np.sum(self.costs))

    def bound_respected(self) -> bool:
        if self.bounds is None:
            return True
        return bool(np.all(self.costs <= self.bounds))


class CostProfiler:
    """
    Mede empiricamente os custos de rebalanceamento da AVL.
    Para cada tamanho n: insere n chaves embaralhadas, faz ciclos de
    split + join sobre chaves sorteadas e remove metade das chaves.
    """
    DEFAULT_SIZES = [100, 500, 1000, 5000]
    DEFAULT_SEED = 42
    DEFAULT_SPLITS = 50
    PATH_CHART = "data/avl_cost_profile.png"

    def __init__(self, sizes: Optional[List[int]] = None, seed: int = DEFAULT_SEED,
                 splits: int = DEFAULT_SPLITS, validate: bool = False, verbose: bool = False):
        self.sizes = sizes if sizes is not None else list(self.DEFAULT_SIZES)
        self.seed = seed
        self.splits = splits
        self.validate = validate
        self.verbose = verbose

    def profile_size(self, n: int) -> Dict[str, OperationStats]:
        rng = random.Random(self.seed + n)
        keys = rng.sample(range(n * 10), n)
        tree = AVLTree()

        # 1. Inserções
        start = time.perf_counter()
        insert_costs = [tree.insert(k, f"v{k}") for k in keys]
        insert_ms = (time.perf_counter() - start) * 1000
        if self.validate:
            assert_valid(tree)

        # 2. Split seguido de join com o mesmo separador
        join_costs: List[int] = []
        join_bounds: List[int] = []
        start = time.perf_counter()
        for k in rng.sample(keys, min(self.splits, n)):
            value = tree.search(k)
            lesser, greater = tree.split(k)
            join_bounds.append(abs(rank_of(lesser.root) - rank_of(greater.root)) + 1)
            join_costs.append(lesser.join(k, value, greater))
            tree = lesser
            if self.validate:
                assert_valid(tree)
        join_ms = (time.perf_counter() - start) * 1000

        # 3. Remoções de metade das chaves
        to_delete = rng.sample(keys, n // 2)
        start = time.perf_counter()
        delete_costs = [tree.delete(k) for k in to_delete]
        delete_ms = (time.perf_counter() - start) * 1000
        if self.validate:
            assert_valid(tree)

        if self.verbose:
            print(f"[PERFIL] n={n:6d} | inserção média {np.mean(insert_costs):.3f} "
                  f"| remoção média {np.mean(delete_costs):.3f} "
                  f"| join médio {np.mean(join_costs) if join_costs else 0.0:.3f}")

        return {
            OperationType.INSERT: OperationStats(OperationType.INSERT, n, np.array(insert_costs), insert_ms),
            OperationType.DELETE: OperationStats(OperationType.DELETE, n, np.array(delete_costs), delete_ms),
            OperationType.JOIN: OperationStats(OperationType.JOIN, n, np.array(join_costs), join_ms,
                                               bounds=np.array(join_bounds)),
        }

    def run(self) -> Dict[int, Dict[str, OperationStats]]:
        if self.verbose:
            print(f"--- Perfil de custos AVL: tamanhos {self.sizes} ---")
        return {n: self.profile_size(n) for n in self.sizes}

    @staticmethod
    def summary(results: Dict[int, Dict[str, OperationStats]]) -> List[dict]:
        """Uma linha por (n, operação) com média, p95, máximo e tempo."""
        rows = []
        for n, by_operation in sorted(results.items()):
            for operation, stats in by_operation.items():
                rows.append({
                    'n': n,
                    'operation': operation,
                    'mean': stats.mean,
                    'p95': stats.p95,
                    'max': stats.max,
                    'elapsed_ms': stats.elapsed_ms,
                    'bound_ok': stats.bound_respected(),
                })
        return rows

    @classmethod
    def plot_profile(cls, results: Dict[int, Dict[str, OperationStats]],
                     filepath: str = PATH_CHART) -> str:
        """Gera o gráfico de custo médio por operação em função de n."""
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)

        sizes = sorted(results)
        plt.figure(figsize=(10, 6))
        for operation, style in ((OperationType.INSERT, 'b-o'),
                                 (OperationType.DELETE, 'r-s'),
                                 (OperationType.JOIN, 'g-^')):
            means = [results[n][operation].mean for n in sizes]
            plt.plot(sizes, means, style, label=operation)
        plt.plot(sizes, np.log2(sizes), 'k--', label='log2(n)')
        plt.xscale('log')
        plt.xlabel('Tamanho (n)')
        plt.ylabel('Operações de rebalanceamento (média)')
        plt.title('Custo Amortizado da AVL por Operação')
        plt.legend()
        plt.grid(True)
        plt.savefig(filepath)
        plt.close()
        return filepath
