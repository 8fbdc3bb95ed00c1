"""
# Resource node graph

A tree of typed nodes: every node owns its ordered children and keeps a weak
reference to its parent, so that the graph can't keep itself alive through
back-pointers and a node can be reachable from exactly one parent.

A node starts UNLINKED and becomes LINKED when added to a parent; linked nodes
live as long as their root.
"""
import logging
import weakref
from enum import Enum, auto

from .exceptions import ReparentError, MalformedContainerError


logger = logging.getLogger(__name__)

MAX_DEPTH = 256


class NodeState(Enum):
    UNLINKED = auto()
    LINKED   = auto()


class ResourceNode(object):
    '''Base class of the nodes of a resource graph: subclasses define "kind".

    A parent owns its children, a child only keeps a weak reference to its
    parent. Hold on to the root while using the nodes below it: once the root
    is collected its children go back to UNLINKED and can be linked again
    under another parent.'''

    kind = None

    def __init__(self):
        self._parent = None
        self._children = []

    def __repr__(self):
        return '<%s(kind=%s, children=%d)>' % (self.__class__.__name__, self.kind, len(self._children))

    @property
    def parent(self):
        return self._parent() if self._parent is not None else None

    @property
    def state(self):
        return NodeState.LINKED if self.parent is not None else NodeState.UNLINKED

    @property
    def children(self):
        return tuple(self._children)

    @property
    def root(self):
        '''Obtain the final parent of this node'''
        node = self
        while node.parent is not None:
            node = node.parent

        return node

    @property
    def is_root(self):
        return self.parent is None

    def iter_ancestors(self):
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def add_child(self, child):
        '''Append child and link it to this node.

        A node can't be moved implicitly from a parent to another, nor be
        added below one of its descendants.'''
        if child.parent is not None:
            raise ReparentError('%r is already linked to %r' % (child, child.parent))

        if child is self or any(node is child for node in self.iter_ancestors()):
            raise ReparentError('adding %r below %r would create a cycle' % (child, self))

        child._parent = weakref.ref(self)
        self._children.append(child)
        logger.debug('linked %s below %s', child.kind, self.kind)

        return child

    def find_ancestor(self, kind):
        '''Walk the parents looking for a node of the given kind, None if there is none.'''
        for node in self.iter_ancestors():
            if node.kind == kind:
                return node

        return None

    def find_children(self, kind):
        return [child for child in self._children if child.kind == kind]

    def find_child(self, kind):
        for child in self._children:
            if child.kind == kind:
                return child

        return None

    def walk(self, max_depth=MAX_DEPTH):
        '''Iterate depth-first over the subtree, yielding (depth, node).'''
        stack = [(0, self)]
        while stack:
            depth, node = stack.pop()
            if depth > max_depth:
                raise MalformedContainerError('graph deeper than %d nodes' % max_depth)

            yield depth, node

            stack.extend((depth + 1, child) for child in reversed(node._children))
