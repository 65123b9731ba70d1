"""Core tree building implementation for the XML beautifier.

This module rebuilds an in-memory document from the events of a streaming
parser. The first start event creates the document and its root element; every
later start event creates a child of the element on top of the frame stack, and
end events pop that stack. Processing instructions are buffered and attached to
the document once the end of the document is reached.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Tuple,
    Union,
)

from xml_beautifier.shared import (
    BuilderConfig,
    BuildMetrics,
    DiagnosticEntry,
    DiagnosticSeverity,
    StructuralInconsistencyError,
    get_logger,
)
from xml_beautifier.tree.diagnostics import DiagnosticReporter
from xml_beautifier.tree.events import EventType, ParseEvent
from xml_beautifier.tree.namespaces import Namespace, resolve_namespace

NO_OUTPUT_TEXT = "<No Output>"

# Only these characters count as whitespace in XML character data
XML_WHITESPACE = " \t\r\n"


class NoResult:
    """Sentinel for "no document was built".

    Distinct from an empty element: it is falsy and there is exactly one
    instance, ``NO_RESULT``.
    """

    _instance: Optional["NoResult"] = None

    def __new__(cls) -> "NoResult":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_RESULT"

    def __str__(self) -> str:
        return NO_OUTPUT_TEXT


NO_RESULT = NoResult()


@dataclass(eq=False)
class XMLElement:
    """A single element of the rebuilt document.

    Attributes keep insertion order. Setting an attribute that already exists
    replaces its value in place (last write wins). At most one namespace
    binding is held directly on the element. As in ElementTree, ``text`` is the
    character data before the first child and ``tail`` the data that follows
    this element inside its parent.
    """

    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    namespace: Optional[Namespace] = None
    text: Optional[str] = None
    tail: Optional[str] = None
    children: List["XMLElement"] = field(default_factory=list)
    parent: Optional["XMLElement"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate the tag and establish parent links for given children."""
        if not self.tag:
            raise ValueError("Element tag cannot be empty")
        for child in self.children:
            child.parent = self

    @property
    def local_name(self) -> str:
        """Get local tag name without namespace prefix."""
        if ":" in self.tag:
            return self.tag.split(":", 1)[1]
        return self.tag

    @property
    def namespace_prefix(self) -> Optional[str]:
        """Get namespace prefix of the tag if present."""
        if ":" in self.tag:
            return self.tag.split(":", 1)[0]
        return None

    def add_child(self, child: "XMLElement") -> None:
        """Append a child element; an element can only have one parent."""
        if not isinstance(child, XMLElement):
            raise TypeError("Child must be an XMLElement instance")
        if child.parent is not None:
            raise ValueError(f"Element <{child.tag}> already has a parent")
        if child is self or child in self.iter_ancestors():
            raise ValueError("An element cannot be added below itself")

        child.parent = self
        self.children.append(child)

    def iter_ancestors(self) -> Iterator["XMLElement"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def set_attribute(self, name: str, value: str) -> bool:
        """Set an attribute value.

        Returns:
            True if an existing value was replaced
        """
        if not isinstance(name, str) or not isinstance(value, str):
            raise TypeError("Attribute name and value must be strings")
        if not name:
            raise ValueError("Attribute name cannot be empty")

        replaced = name in self.attributes
        self.attributes[name] = value
        return replaced

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(name, default)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def set_namespace(self, namespace: Namespace) -> Optional[Namespace]:
        """Bind a namespace on this element and return the binding it replaced."""
        previous = self.namespace
        self.namespace = namespace
        return previous

    def append_text(self, content: str) -> None:
        """Append character data at the current end of this element's content."""
        if self.children:
            last = self.children[-1]
            last.tail = content if last.tail is None else last.tail + content
        else:
            self.text = content if self.text is None else self.text + content

    def normalize_text(self) -> None:
        """Strip XML whitespace around text and child tails; blank runs become None."""
        if self.text is not None:
            self.text = self.text.strip(XML_WHITESPACE) or None
        for child in self.children:
            if child.tail is not None:
                child.tail = child.tail.strip(XML_WHITESPACE) or None

    def find_child(self, tag: str) -> Optional["XMLElement"]:
        """Find first direct child with matching tag name."""
        for child in self.children:
            if child.tag == tag:
                return child
        return None

    def find_children(self, tag: str) -> List["XMLElement"]:
        """Find all direct children with matching tag name."""
        return [child for child in self.children if child.tag == tag]

    def iter(self) -> Iterator["XMLElement"]:
        """Iterate over this element and its descendants in document order."""
        pending = [self]
        while pending:
            element = pending.pop()
            yield element
            pending.extend(reversed(element.children))

    def find(self, tag: str) -> Optional["XMLElement"]:
        """Find first descendant element with matching tag name."""
        return next((e for e in self.iter() if e is not self and e.tag == tag), None)

    def find_all(self, tag: str) -> List["XMLElement"]:
        """Find all descendant elements with matching tag name."""
        return [e for e in self.iter() if e is not self and e.tag == tag]

    def get_depth(self) -> int:
        """Get depth of this element in the tree (root = 0)."""
        return sum(1 for _ in self.iter_ancestors())

    def get_path(self) -> str:
        """Get XPath-like path to this element."""
        if self.parent is None:
            return f"/{self.tag}"

        parent_path = self.parent.get_path()
        siblings = self.parent.find_children(self.tag)
        if len(siblings) > 1:
            position = next(i for i, s in enumerate(siblings, 1) if s is self)
            return f"{parent_path}/{self.tag}[{position}]"
        return f"{parent_path}/{self.tag}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert element to dictionary representation."""
        result: Dict[str, Any] = {"tag": self.tag}
        if self.namespace is not None:
            result["namespace"] = {
                "prefix": self.namespace.prefix,
                "uri": self.namespace.uri,
            }
        if self.attributes:
            result["attributes"] = dict(self.attributes)
        if self.text:
            result["text"] = self.text
        if self.tail:
            result["tail"] = self.tail
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


@dataclass(frozen=True)
class ProcessingInstruction:
    """A processing instruction, kept in the order it was encountered."""

    target: str
    data: str = ""

    def __post_init__(self) -> None:
        if not self.target:
            raise ValueError("Processing instruction target cannot be empty")


@dataclass(eq=False)
class XMLDocument:
    """The rebuilt document: one root element plus its processing instructions.

    The document-level namespace binding is the binding declared on the root
    start tag, so ``document.namespace`` and ``document.root.namespace`` agree.
    """

    root: XMLElement
    processing_instructions: List[ProcessingInstruction] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.root, XMLElement):
            raise TypeError("Document root must be an XMLElement instance")
        if self.root.parent is not None:
            raise ValueError("Document root cannot have a parent element")

    @property
    def namespace(self) -> Optional[Namespace]:
        return self.root.namespace

    def set_namespace(self, namespace: Namespace) -> Optional[Namespace]:
        return self.root.set_namespace(namespace)

    def set_attribute(self, name: str, value: str) -> bool:
        return self.root.set_attribute(name, value)

    def add_processing_instruction(self, instruction: ProcessingInstruction) -> None:
        self.processing_instructions.append(instruction)

    def iter_elements(self) -> Iterator[XMLElement]:
        """Iterate over all elements in document order."""
        return self.root.iter()

    @property
    def element_count(self) -> int:
        return sum(1 for _ in self.iter_elements())

    def find(self, tag: str) -> Optional[XMLElement]:
        """Find first element with matching tag name, the root included."""
        return next((e for e in self.iter_elements() if e.tag == tag), None)

    def find_all(self, tag: str) -> List[XMLElement]:
        """Find all elements with matching tag name, the root included."""
        return [e for e in self.iter_elements() if e.tag == tag]

    def to_dict(self) -> Dict[str, Any]:
        """Convert document to dictionary representation."""
        return {
            "processing_instructions": [
                {"target": pi.target, "data": pi.data}
                for pi in self.processing_instructions
            ],
            "root": self.root.to_dict(),
        }


DocumentOrNothing = Union[XMLDocument, NoResult]


class BuildState(Enum):
    """States of the tree builder."""

    EMPTY = auto()      # No start event seen yet
    BUILDING = auto()   # Root exists, zero or more elements open
    CLOSED = auto()     # Every open element has been closed
    ABORTED = auto()    # A fatal parser error was reported


class FrameStack:
    """Stack of currently open elements, held as handles into the builder's arena."""

    def __init__(self) -> None:
        self._handles: List[int] = []

    def push(self, handle: int) -> None:
        self._handles.append(handle)

    def pop(self) -> Optional[int]:
        """Pop the top handle; popping an empty stack returns None."""
        if not self._handles:
            return None
        return self._handles.pop()

    def peek(self) -> Optional[int]:
        return self._handles[-1] if self._handles else None

    def handles(self) -> Tuple[int, ...]:
        """Open handles from the root (bottom) to the current element (top)."""
        return tuple(self._handles)

    @property
    def depth(self) -> int:
        return len(self._handles)

    def __len__(self) -> int:
        return len(self._handles)

    def __bool__(self) -> bool:
        return bool(self._handles)


class ProcessingInstructionCollector:
    """Buffers processing instructions until the document is finished."""

    def __init__(self) -> None:
        self._buffer: List[ProcessingInstruction] = []

    def add(self, target: str, data: str) -> ProcessingInstruction:
        instruction = ProcessingInstruction(target, data)
        self._buffer.append(instruction)
        return instruction

    def attach_to(self, document: XMLDocument) -> int:
        """Attach every buffered instruction in arrival order and empty the buffer."""
        for instruction in self._buffer:
            document.add_processing_instruction(instruction)
        return self.discard()

    def discard(self) -> int:
        count = len(self._buffer)
        self._buffer.clear()
        return count

    def __len__(self) -> int:
        return len(self._buffer)

    def __iter__(self) -> Iterator[ProcessingInstruction]:
        return iter(self._buffer)


@dataclass
class BuildResult:
    """Outcome of one build: the document (or NO_RESULT) plus diagnostics."""

    document: DocumentOrNothing = NO_RESULT
    success: bool = True
    state: BuildState = BuildState.EMPTY
    unclosed_elements: int = 0
    unmatched_end_elements: int = 0
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    metrics: BuildMetrics = field(default_factory=BuildMetrics)
    correlation_id: Optional[str] = None

    @property
    def has_document(self) -> bool:
        return isinstance(self.document, XMLDocument)

    @property
    def element_count(self) -> int:
        return self.document.element_count if isinstance(self.document, XMLDocument) else 0

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            position=position,
            details=details,
            correlation_id=self.correlation_id
        ))

    def get_diagnostics_by_severity(
        self, severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    @property
    def fatal_diagnostic(self) -> Optional[DiagnosticEntry]:
        return next(
            (d for d in self.diagnostics if d.severity == DiagnosticSeverity.CRITICAL),
            None
        )

    @property
    def summary(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "has_document": self.has_document,
            "state": self.state.name,
            "element_count": self.element_count,
            "unclosed_elements": self.unclosed_elements,
            "unmatched_end_elements": self.unmatched_end_elements,
            "diagnostic_count": len(self.diagnostics),
            "metrics": self.metrics.to_dict(),
            "correlation_id": self.correlation_id,
        }


class XMLTreeBuilder:
    """Rebuilds a document tree from a stream of ``ParseEvent`` values.

    One builder handles exactly one input. ``handle`` is the single transition
    function; ``feed`` drives it from an iterable of events and returns the
    ``BuildResult``.
    """

    def __init__(
        self,
        config: Optional[BuilderConfig] = None,
        correlation_id: Optional[str] = None,
        reporter: Optional[DiagnosticReporter] = None
    ) -> None:
        self.config = config or BuilderConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_tree_builder")
        self.reporter = reporter or DiagnosticReporter(correlation_id)
        self.metrics = BuildMetrics()

        self._arena: List[XMLElement] = []
        self._stack = FrameStack()
        self._instructions = ProcessingInstructionCollector()
        self._document: DocumentOrNothing = NO_RESULT
        self._state = BuildState.EMPTY
        self._finished = False
        self._unmatched_end_elements = 0
        self._start_time: Optional[float] = None

    @property
    def state(self) -> BuildState:
        return self._state

    @property
    def depth(self) -> int:
        return self._stack.depth

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def open_elements(self) -> List[XMLElement]:
        """Currently open elements from the root down to the current one."""
        return [self._arena[handle] for handle in self._stack.handles()]

    @property
    def pending_instructions(self) -> List[ProcessingInstruction]:
        return list(self._instructions)

    @property
    def output(self) -> DocumentOrNothing:
        """The document built so far, or NO_RESULT."""
        if self._state is BuildState.ABORTED:
            return NO_RESULT
        return self._document

    def feed(self, events: Iterable[ParseEvent]) -> BuildResult:
        """Process every event in order and return the build result."""
        self.logger.info("Starting tree building")
        for event in events:
            self.handle(event)
        result = self.result()
        self.logger.info("Tree building completed", extra=result.summary)
        return result

    def handle(self, event: ParseEvent) -> None:
        """Apply one event to the builder state."""
        if self._finished:
            raise RuntimeError(
                "END_DOCUMENT already processed; use a new builder for each input"
            )
        if self._start_time is None:
            self._start_time = time.perf_counter()
        self.metrics.events_processed += 1

        if self._state is BuildState.ABORTED and event.type is not EventType.END_DOCUMENT:
            self.logger.debug(
                "Ignoring event after fatal error", extra={"event": event.type.name}
            )
            return

        if event.is_diagnostic:
            self._on_diagnostic(event)
        elif event.type is EventType.START_ELEMENT:
            self._on_start_element(event)
        elif event.type is EventType.END_ELEMENT:
            self._on_end_element(event)
        elif event.type is EventType.ATTRIBUTE:
            self._on_attribute(event)
        elif event.type is EventType.TEXT:
            self._on_text(event)
        elif event.type is EventType.PROCESSING_INSTRUCTION:
            self._instructions.add(event.name, event.value)
            self.metrics.processing_instructions += 1
        elif event.type is EventType.END_DOCUMENT:
            self._on_end_document()
        else:
            raise ValueError(f"Unsupported event type: {event.type}")

    def result(self) -> BuildResult:
        """Snapshot the current outcome; valid before or after END_DOCUMENT."""
        if self._start_time is not None:
            self.metrics.processing_time_ms = (time.perf_counter() - self._start_time) * 1000

        return BuildResult(
            document=self.output,
            success=self._state is not BuildState.ABORTED,
            state=self._state,
            unclosed_elements=self._stack.depth,
            unmatched_end_elements=self._unmatched_end_elements,
            diagnostics=list(self.reporter.entries),
            metrics=self.metrics,
            correlation_id=self.correlation_id,
        )

    # Transitions

    def _on_start_element(self, event: ParseEvent) -> None:
        if isinstance(self._document, NoResult):
            handle = self._new_element(event.name)
            root = self._arena[handle]
            document = XMLDocument(root=root)
            self._document = document
            self._apply_attributes(event.attributes, root, document.set_namespace)
            self.logger.debug("Document root created", extra={"tag": event.name})
        else:
            parent_handle = self._stack.peek()
            if parent_handle is None:
                self._inconsistency(
                    f"Element <{event.name}> started with no open element; "
                    "attached under the root element"
                )
                parent = self._document.root
            else:
                parent = self._arena[parent_handle]

            handle = self._new_element(event.name)
            element = self._arena[handle]
            parent.add_child(element)
            self._apply_attributes(event.attributes, element, element.set_namespace)

        self._stack.push(handle)
        self._state = BuildState.BUILDING
        self.metrics.record_depth(self._stack.depth)

        if self._stack.depth > self.config.max_depth:
            self._inconsistency(
                f"Element <{event.name}> exceeds the maximum depth of {self.config.max_depth}",
                severity=DiagnosticSeverity.ERROR,
            )

    def _on_end_element(self, event: ParseEvent) -> None:
        handle = self._stack.pop()
        if handle is None:
            self._unmatched_end_elements += 1
            if self.config.strict_mode:
                self._inconsistency(f"End of <{event.name}> without an open element")
            self.logger.debug(
                "Ignoring end event without open element", extra={"tag": event.name}
            )
            return

        self._arena[handle].normalize_text()
        if not self._stack:
            self._state = BuildState.CLOSED

    def _on_attribute(self, event: ParseEvent) -> None:
        handle = self._stack.peek()
        if handle is None:
            self._inconsistency(f"Attribute '{event.name}' received with no open element")
            return

        element = self._arena[handle]
        if isinstance(self._document, XMLDocument) and element is self._document.root:
            setter = self._document.set_namespace
        else:
            setter = element.set_namespace
        self._apply_attributes(((event.name, event.value),), element, setter)

    def _on_text(self, event: ParseEvent) -> None:
        if not self.config.keep_text:
            return
        handle = self._stack.peek()
        if handle is None:
            if event.value.strip(XML_WHITESPACE):
                self.logger.debug("Dropping character data outside the root element")
            return
        self._arena[handle].append_text(event.value)

    def _on_diagnostic(self, event: ParseEvent) -> None:
        if event.type is EventType.WARNING:
            self.reporter.warning(event.value, event.position)
        elif event.type is EventType.ERROR:
            self.reporter.error(event.value, event.position)
        else:
            self.reporter.fatal(event.value, event.position)
            self._state = BuildState.ABORTED

    def _on_end_document(self) -> None:
        self._finished = True

        if self._state is BuildState.ABORTED or isinstance(self._document, NoResult):
            discarded = self._instructions.discard()
            self.logger.debug(
                "No document built", extra={"discarded_instructions": discarded}
            )
            return

        open_count = self._stack.depth
        if open_count:
            for element in self.open_elements:
                element.normalize_text()
            self._inconsistency(f"{open_count} element(s) left open at end of document")

        attached = self._instructions.attach_to(self._document)
        self.logger.debug(
            "Processing instructions attached", extra={"count": attached}
        )

    # Helpers

    def _new_element(self, tag: str) -> int:
        self._arena.append(XMLElement(tag=tag))
        self.metrics.elements_created += 1
        return len(self._arena) - 1

    def _apply_attributes(
        self,
        attributes: Iterable[Tuple[str, str]],
        element: XMLElement,
        namespace_setter: Callable[[Namespace], Optional[Namespace]]
    ) -> None:
        for name, value in attributes:
            namespace = resolve_namespace(name, value)
            if namespace is None:
                if element.set_attribute(name, value):
                    self.logger.debug(
                        "Attribute value replaced",
                        extra={"tag": element.tag, "attribute": name}
                    )
                self.metrics.attributes_set += 1
                continue

            previous = namespace_setter(namespace)
            self.metrics.namespaces_declared += 1
            if previous is not None and previous != namespace:
                self.reporter.inconsistency(
                    f"Namespace declaration '{namespace.attribute_name}' on <{element.tag}> "
                    f"replaces '{previous.attribute_name}'",
                    details={"replaced_uri": previous.uri, "uri": namespace.uri},
                )

    def _inconsistency(
        self,
        message: str,
        severity: DiagnosticSeverity = DiagnosticSeverity.WARNING
    ) -> None:
        if self.config.strict_mode:
            self.reporter.inconsistency(message, DiagnosticSeverity.ERROR)
            raise StructuralInconsistencyError(message, depth=self._stack.depth)
        self.reporter.inconsistency(message, severity)
