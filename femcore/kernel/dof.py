# femcore/kernel/dof.py
"""
DOF MANAGER: Dimension-Agnostic Degree of Freedom Indexing
==========================================================

PURPOSE:
--------
Maps (node_id, local_dof) to global DOF indices. The only thing that
changes between the two analysis paths is the number of DOFs per node:

    Plane (membrane):  2 DOF/node (DX, DY)
    3D beam frame:     6 DOF/node (DX, DY, DZ, RX, RY, RZ)

Node ids do not have to be 0..n-1. The manager keeps the model's node
order and places node k's DOFs at block ``position(k)``:

    global index = dof_per_node × position(node_id) + local_dof

USAGE:
------
    dof = DOFManager(dof_per_node=6, node_ids=[10, 20, 30])
    dof.idx(20, 1)            # → 7  (DY of the second node)
    dof.label(7)              # → "NodeId=20:DY"
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

DOF_NAMES_3D = ("DX", "DY", "DZ", "RX", "RY", "RZ")
DOF_NAMES_2D = ("DX", "DY")


@dataclass
class DOFManager:
    """
    Manages degree-of-freedom indexing for structural analysis.

    Attributes:
    -----------
    dof_per_node : int
        2 for the plane path, 6 for the beam path
    node_ids : Optional[Sequence[int]]
        Node ids in model order. When omitted, node ids are taken to be
        their own block positions (0, 1, 2, ...).

    Examples:
    ---------
    >>> dof = DOFManager(dof_per_node=6)
    >>> dof.idx(1, 0)  # Node 1, DX
    6
    >>> dof.element_dof_map([0, 1])[:3]
    [0, 1, 2]
    """
    dof_per_node: int
    node_ids: Optional[Sequence[int]] = None
    _position: Dict[int, int] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        if self.node_ids is not None:
            self.node_ids = list(self.node_ids)
            self._position = {nid: k for k, nid in enumerate(self.node_ids)}
            if len(self._position) != len(self.node_ids):
                raise ValueError("DOFManager: node ids must be unique.")

    @property
    def dof_names(self) -> Sequence[str]:
        if self.dof_per_node == 6:
            return DOF_NAMES_3D
        if self.dof_per_node == 2:
            return DOF_NAMES_2D
        return tuple(f"U{k}" for k in range(self.dof_per_node))

    def position(self, node_id: int) -> int:
        """Block position of a node in the global vector."""
        if self.node_ids is None:
            return node_id
        try:
            return self._position[node_id]
        except KeyError:
            raise KeyError(f"Node ID {node_id} is not part of this DOF map") from None

    def idx(self, node_id: int, local_dof: int) -> int:
        """
        Get the global DOF index for a node's local DOF.

        Parameters:
        -----------
        node_id : int
            The node identifier
        local_dof : int
            0 to dof_per_node-1, in the order of ``dof_names``

        Returns:
        --------
        int
            Global DOF index in the system matrices
        """
        return self.dof_per_node * self.position(node_id) + local_dof

    def ndof(self, n_nodes: Optional[int] = None) -> int:
        """Total DOFs; defaults to the number of registered nodes."""
        if n_nodes is None:
            if self.node_ids is None:
                raise ValueError("ndof() needs n_nodes when no node ids are registered.")
            n_nodes = len(self.node_ids)
        return self.dof_per_node * n_nodes

    def node_dofs(self, node_id: int) -> List[int]:
        """All global DOF indices of one node, e.g. [12, ..., 17] for 6 DOF/node at position 2."""
        base = self.dof_per_node * self.position(node_id)
        return list(range(base, base + self.dof_per_node))

    def element_dof_map(self, node_ids: Sequence[int]) -> List[int]:
        """
        Flattened global DOF indices of an element's nodes, in node order.
        Used to scatter element matrices into K and gather displacements back.
        """
        result = []
        for node_id in node_ids:
            result.extend(self.node_dofs(node_id))
        return result

    def node_of(self, index: int) -> int:
        """Node id owning a global DOF index."""
        block = index // self.dof_per_node
        if self.node_ids is None:
            return block
        return self.node_ids[block]

    def label(self, index: int) -> str:
        """Human-readable name of a global DOF, e.g. 'NodeId=3:RZ'."""
        name = self.dof_names[index % self.dof_per_node]
        return f"NodeId={self.node_of(index)}:{name}"

    def labels(self, indices: Optional[Sequence[int]] = None) -> List[str]:
        if indices is None:
            indices = range(self.ndof())
        return [self.label(int(i)) for i in indices]
