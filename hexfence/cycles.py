# hexfence/cycles.py
import logging
from collections import defaultdict
from typing import Dict, List

from hexfence.config import param
from hexfence.errors import DeadEndChain, IterationLimitExceeded, UnclosedLoop

logger = logging.getLogger(__name__)


def build_adjacency(edges) -> Dict[tuple, List[int]]:
    """start key -> [edge index], in the order edges were discovered."""
    adj = defaultdict(list)
    for i, e in enumerate(edges):
        adj[e.a].append(i)
    return adj


def walk_chain(edges, adj, used, i0, max_steps=None, min_points=None) -> List[int]:
    """
    Walk from edges[i0] always taking the first unused outgoing edge
    until the walk is back on the start vertex.
    Returns the edge indices of the loop. Edges taken are marked in `used`
    even when the walk fails, so a broken chain is not retried.
    """
    max_steps = param("MAX_WALK_STEPS", max_steps)
    min_points = param("MIN_LOOP_POINTS", min_points)

    used.add(i0)
    start = edges[i0].a
    cur = edges[i0].b
    chain = [i0]
    steps = 0
    while cur != start:
        steps += 1
        if steps > max_steps:
            raise IterationLimitExceeded(f"walk from {start} exceeded {max_steps} steps")
        nxt = None
        for j in adj.get(cur, ()):
            if j not in used:
                nxt = j
                break
        if nxt is None:
            raise DeadEndChain(f"no unused edge out of {cur} (chain of {len(chain)})")
        used.add(nxt)
        chain.append(nxt)
        cur = edges[nxt].b

    # closed: chain edges give len(chain) vertices + the repeated first one
    if len(chain) + 1 < min_points:
        raise UnclosedLoop(f"loop of {len(chain)} edges is too short")
    return chain


def chain_points(edges, chain):
    """Closed vertex list of a loop of edge indices."""
    pts = [edges[i].pa for i in chain]
    pts.append(edges[chain[0]].pa)
    return pts


def find_closed_loops(edges, max_steps=None, min_points=None):
    """
    All closed loops that the surviving directed edges form, in discovery order.
    Walks that dead-end, loop short or overrun are dropped one by one.
    """
    adj = build_adjacency(edges)
    used = set()
    loops = []
    dropped = defaultdict(int)
    for i in range(len(edges)):
        if i in used:
            continue
        try:
            chain = walk_chain(edges, adj, used, i, max_steps, min_points)
        except (DeadEndChain, UnclosedLoop, IterationLimitExceeded) as e:
            dropped[type(e).__name__] += 1
            logger.debug("chain dropped: %s", e)
            continue
        loops.append(chain_points(edges, chain))
    if dropped:
        logger.debug("closed loops: %d, dropped: %s", len(loops), dict(dropped))
    return loops


def largest_loop(loops):
    """Most vertices wins; on a tie the first one found stays."""
    best = None
    for cyc in loops:
        if best is None or len(cyc) > len(best):
            best = cyc
    return best or []
