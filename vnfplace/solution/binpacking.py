"""首次适应递减（FFD）装箱模块。"""

from dataclasses import dataclass, field
from typing import Generic, Iterable, List, Tuple, TypeVar

T = TypeVar('T')

@dataclass
class Packing(Generic[T]):
    """装箱结果：每个箱子的负载及其中的物品"""
    loads: List[float] = field(default_factory=list)
    items: List[List[T]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.loads)

def first_fit_decreasing(demands: Iterable[Tuple[T, float]], capacity: float) -> Packing:
    """首次适应递减装箱

    按需求从大到小排序（需求相同时保持原有顺序），依次放入第一个
    放得下的箱子，都放不下时新开一个箱子。单个需求超过容量时独占一个箱子。

    Args:
        demands: (物品, 需求)序列
        capacity: 箱子容量

    Returns:
        装箱结果
    """
    packing = Packing()
    for item, demand in sorted(demands, key=lambda d: -d[1]):
        for i, load in enumerate(packing.loads):
            if load + demand <= capacity:
                packing.loads[i] = load + demand
                packing.items[i].append(item)
                break
        else:
            packing.loads.append(demand)
            packing.items.append([item])
    return packing
