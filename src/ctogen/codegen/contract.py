# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Synthesize an ink! smart contract from classified declarations.

The contract is built as plain data first (storage layout, events,
messages, error enum, the data structures it exchanges, and the state
machine its messages follow) and rendered to Rust afterwards, so that
its shape can be inspected and tested without a Rust toolchain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ctogen.codegen.type_mapping import contract_name_for, default_value, to_module_name, to_package_name
from ctogen.compiler.classifier import ClassifiedModel
from ctogen.logging import get_logger
from ctogen.model.schema import Declaration, Property

logger = get_logger(__name__)

# Template model properties that describe the clause rather than its terms.
METADATA_PROPERTIES = frozenset({"$class", "$timestamp", "clauseId", "$identifier"})

# Concepts that get a contract-side data structure when they have fields.
CONTRACT_CONCEPTS = ("Penalty", "MonetaryAmount", "Period", "Duration")

INK_VERSION = "5.1.1"

# ###############
# Public Interface
# ###############


class ContractState(Enum):
    """Lifecycle states of a generated contract. Neither is terminal."""

    ACTIVE = "Active"
    PAUSED = "Paused"


class ContractErrorKind(Enum):
    """Variants of the generated ``ContractError`` enum."""

    UNAUTHORIZED = "Unauthorized"
    CONTRACT_PAUSED = "ContractPaused"
    INVALID_INPUT = "InvalidInput"
    PROCESSING_FAILED = "ProcessingFailed"


class ContractFault(Exception):
    """Raised by :meth:`StateMachine.transition` for a call the contract rejects.

    Attributes:
        kind: The error the generated message returns.
    """

    def __init__(self, kind: ContractErrorKind, message: str) -> None:
        super().__init__(f"{kind.value}: {message}")
        self.kind = kind


@dataclass(frozen=True)
class StorageField:
    """One field of the contract storage or of a contract data structure."""

    name: str
    rust_type: str
    source: str | None = None


@dataclass(frozen=True)
class EventField:
    name: str
    rust_type: str
    topic: bool = False


@dataclass(frozen=True)
class EventDef:
    name: str
    fields: tuple[EventField, ...]
    description: str


@dataclass(frozen=True)
class MessageDef:
    """A public contract message.

    Attributes:
        name: Rust method name.
        params: ``(name, type)`` pairs, excluding ``self``.
        returns: Rust return type.
        mutates: Whether the message takes ``&mut self``.
        owner_only: Whether a caller other than the owner is rejected.
        requires_active: Whether the message is rejected while paused.
    """

    name: str
    params: tuple[tuple[str, str], ...] = ()
    returns: str = "()"
    mutates: bool = False
    owner_only: bool = False
    requires_active: bool = False
    description: str = ""


@dataclass(frozen=True)
class DataStructure:
    """An ink!-encodable struct the contract exchanges or stores."""

    name: str
    fields: tuple[StorageField, ...]
    derive_default: bool = False


class StateMachine:
    """The pause state machine every generated contract follows.

    ``pause`` and ``unpause`` are owner-only and move to ``Paused`` and
    ``Active`` respectively from either state. ``process_request`` is only
    accepted while ``Active``. Every other message is read-only and
    accepted in both states.
    """

    initial_state = ContractState.ACTIVE

    def __init__(self, messages: list[MessageDef]) -> None:
        self._messages = {m.name: m for m in messages}

    def transition(self, state: ContractState, message: str, is_owner: bool = True) -> ContractState:
        """Return the state after *message* is called in *state*.

        Args:
            state: Current state.
            message: Name of the message being called.
            is_owner: Whether the caller is the contract owner.

        Returns:
            The next state.

        Raises:
            ContractFault: If the generated contract rejects the call.
            KeyError: If the contract has no message called *message*.
        """
        definition = self._messages[message]
        if definition.owner_only and not is_owner:
            raise ContractFault(ContractErrorKind.UNAUTHORIZED, f"'{message}' may only be called by the owner")
        if definition.requires_active and state == ContractState.PAUSED:
            raise ContractFault(ContractErrorKind.CONTRACT_PAUSED, f"'{message}' is rejected while paused")
        if message == "pause":
            return ContractState.PAUSED
        if message == "unpause":
            return ContractState.ACTIVE
        return state


@dataclass
class ContractArtifact:
    """A synthesized contract, ready to be rendered."""

    contract_name: str
    module_name: str
    package_name: str
    template_model: Declaration | None
    request: Declaration | None
    response: Declaration | None
    storage: list[StorageField] = field(default_factory=list)
    events: list[EventDef] = field(default_factory=list)
    messages: list[MessageDef] = field(default_factory=list)
    errors: list[ContractErrorKind] = field(default_factory=lambda: list(ContractErrorKind))
    data_structures: list[DataStructure] = field(default_factory=list)
    template_models: list[Declaration] = field(default_factory=list)

    @property
    def domain_fields(self) -> list[StorageField]:
        """Storage fields that come from the template model."""
        return [f for f in self.storage if f.source is not None]

    @property
    def has_request_processing(self) -> bool:
        return self.request is not None and self.response is not None

    @property
    def state_machine(self) -> StateMachine:
        return StateMachine(self.messages)

    def render_lib_rs(self) -> str:
        """Render ``src/lib.rs``."""
        return _render_lib_rs(self)

    def render_cargo_toml(self) -> str:
        """Render the crate manifest."""
        return _CARGO_TOML.format(package_name=self.package_name, ink_version=INK_VERSION)

    def render_readme(self) -> str:
        """Render the crate ``README.md``."""
        return _render_readme(self)


def synthesize_contract(classified: ClassifiedModel, contract_name: str | None = None) -> ContractArtifact:
    """Build the contract for the primary template model, request and response.

    Without a template model the contract has no domain storage; without a
    request and a response it has no ``process_request`` message.

    Args:
        classified: Output of the declaration classifier.
        contract_name: Overrides the name derived from the template model.

    Returns:
        The synthesized :class:`ContractArtifact`.
    """
    template_model = classified.primary_template_model
    request = classified.primary_request
    response = classified.primary_response
    name = contract_name or contract_name_for(template_model.name if template_model else None)

    storage = [StorageField("owner", "AccountId"), StorageField("paused", "bool")]
    if template_model is not None:
        storage.extend(
            StorageField(p.field_name, p.target_type, source=p.name)
            for p in template_model.properties
            if p.name not in METADATA_PROPERTIES
        )

    artifact = ContractArtifact(
        contract_name=name,
        module_name=to_module_name(name),
        package_name=to_package_name(name),
        template_model=template_model,
        request=request,
        response=response,
        storage=storage,
        template_models=list(classified.template_models),
    )
    artifact.events = _build_events(artifact)
    artifact.messages = _build_messages(artifact)
    artifact.data_structures = _build_data_structures(classified)
    logger.info(
        "Synthesized contract %s: %d storage field(s), %d event(s), %d message(s)",
        name,
        len(artifact.storage),
        len(artifact.events),
        len(artifact.messages),
    )
    return artifact


# ################
# Implementation
# ################


def _build_events(artifact: ContractArtifact) -> list[EventDef]:
    events = [
        EventDef("ContractCreated", (EventField("owner", "AccountId", topic=True),), "Emitted when contract is created"),
        EventDef("ContractPaused", (EventField("by", "AccountId", topic=True),), "Emitted when contract is paused"),
        EventDef("ContractUnpaused", (EventField("by", "AccountId", topic=True),), "Emitted when contract is unpaused"),
    ]
    if artifact.request is not None and artifact.response is not None:
        events.append(
            EventDef(
                f"{artifact.request.name}Submitted",
                (EventField("submitter", "AccountId", topic=True), EventField("request_id", "u64", topic=True)),
                "Emitted when a request is submitted",
            )
        )
        events.append(
            EventDef(
                f"{artifact.response.name}Generated",
                (EventField("request_id", "u64", topic=True), EventField("success", "bool")),
                "Emitted when a response is generated",
            )
        )
    return events


def _build_messages(artifact: ContractArtifact) -> list[MessageDef]:
    messages = [
        MessageDef("get_owner", returns="AccountId", description="Returns the contract owner"),
        MessageDef("is_paused", returns="bool", description="Returns whether the contract is paused"),
        MessageDef(
            "pause", returns="Result<()>", mutates=True, owner_only=True, description="Pause the contract (owner only)"
        ),
        MessageDef(
            "unpause",
            returns="Result<()>",
            mutates=True,
            owner_only=True,
            description="Unpause the contract (owner only)",
        ),
    ]
    if artifact.request is not None and artifact.response is not None:
        messages.append(
            MessageDef(
                "process_request",
                params=(("request", artifact.request.name),),
                returns=f"Result<{artifact.response.name}>",
                mutates=True,
                requires_active=True,
                description="Process a contract request",
            )
        )
    for storage_field in artifact.domain_fields:
        messages.append(
            MessageDef(
                _getter_name(storage_field),
                returns=storage_field.rust_type,
                description=f"Get {storage_field.source}",
            )
        )
    return messages


def _build_data_structures(classified: ClassifiedModel) -> list[DataStructure]:
    structures: list[DataStructure] = []
    generated: set[str] = set()

    def _fields(properties: list[Property], excluded: frozenset[str]) -> tuple[StorageField, ...]:
        return tuple(StorageField(p.field_name, p.target_type, source=p.name) for p in properties if p.name not in excluded)

    for declaration in [*classified.requests, *classified.responses]:
        if declaration.name in generated:
            continue
        generated.add(declaration.name)
        structures.append(DataStructure(declaration.name, _fields(declaration.properties, _TRANSIENT)))

    for concept in classified.concepts:
        if concept.name not in CONTRACT_CONCEPTS or concept.name in generated:
            continue
        generated.add(concept.name)
        fields = _fields(concept.properties, _TRANSIENT | {"$identifier"})
        if fields:
            structures.append(DataStructure(concept.name, fields, derive_default=True))

    for participant in classified.participants:
        if participant.name in generated:
            continue
        generated.add(participant.name)
        fields = _fields(participant.properties, _TRANSIENT | {"partyId", "$identifier"})
        structures.append(
            DataStructure(participant.name, (StorageField("party_id", "String"), *fields), derive_default=True)
        )
    return structures


_TRANSIENT = frozenset({"$class", "$timestamp"})


def _getter_name(storage_field: StorageField) -> str:
    return "get_" + storage_field.name.removeprefix("r#")


_STRUCT_DERIVE = "#[derive(scale::Decode, scale::Encode, Clone, PartialEq, Eq, Debug{extra})]"
_STRUCT_CFG_ATTR = (
    '#[cfg_attr(feature = "std", derive(scale_info::TypeInfo, ink::storage::traits::StorageLayout))]'
)


def _indent(lines: list[str], level: int) -> list[str]:
    prefix = "    " * level
    return [prefix + line if line else "" for line in lines]


def _render_data_structure(structure: DataStructure) -> list[str]:
    lines = [
        _STRUCT_DERIVE.format(extra=", Default" if structure.derive_default else ""),
        _STRUCT_CFG_ATTR,
        f"pub struct {structure.name} {{",
    ]
    lines.extend(f"    pub {f.name}: {f.rust_type}," for f in structure.fields)
    lines.append("}")
    return lines


def _render_storage(artifact: ContractArtifact) -> list[str]:
    lines = ["#[ink(storage)]", f"pub struct {artifact.contract_name} {{"]
    lines.extend(f"    {f.name}: {f.rust_type}," for f in artifact.storage)
    lines.append("}")
    return lines


def _render_event(event: EventDef) -> list[str]:
    lines = ["#[ink(event)]", f"pub struct {event.name} {{"]
    for event_field in event.fields:
        if event_field.topic:
            lines.append("    #[ink(topic)]")
        lines.append(f"    pub {event_field.name}: {event_field.rust_type},")
    lines.append("}")
    return lines


def _render_impl(artifact: ContractArtifact) -> list[str]:
    domain = artifact.domain_fields
    params = ", ".join(f"{f.name}: {f.rust_type}" for f in domain)
    defaults = ", ".join(default_value(f.rust_type) for f in domain)
    lines = [
        f"impl {artifact.contract_name} {{",
        "    #[ink(constructor)]",
        f"    pub fn new({params}) -> Self {{",
        "        let caller = Self::env().caller();",
        "        Self::env().emit_event(ContractCreated { owner: caller });",
        "",
        "        Self {",
        "            owner: caller,",
        "            paused: false,",
    ]
    lines.extend(f"            {f.name}," for f in domain)
    lines.extend(
        [
            "        }",
            "    }",
            "",
            "    #[ink(constructor)]",
            "    pub fn default() -> Self {",
            f"        Self::new({defaults})",
            "    }",
            "",
            "    #[ink(message)]",
            "    pub fn get_owner(&self) -> AccountId {",
            "        self.owner",
            "    }",
            "",
            "    #[ink(message)]",
            "    pub fn is_paused(&self) -> bool {",
            "        self.paused",
            "    }",
        ]
    )
    for message, paused, event in (("pause", "true", "ContractPaused"), ("unpause", "false", "ContractUnpaused")):
        lines.extend(
            [
                "",
                "    #[ink(message)]",
                f"    pub fn {message}(&mut self) -> Result<()> {{",
                "        let caller = self.env().caller();",
                "        if caller != self.owner {",
                "            return Err(ContractError::Unauthorized);",
                "        }",
                "",
                f"        self.paused = {paused};",
                f"        self.env().emit_event({event} {{ by: caller }});",
                "        Ok(())",
                "    }",
            ]
        )

    if artifact.request is not None and artifact.response is not None:
        request, response = artifact.request.name, artifact.response.name
        lines.extend(
            [
                "",
                "    #[ink(message)]",
                f"    pub fn process_request(&mut self, request: {request}) -> Result<{response}> {{",
                "        if self.paused {",
                "            return Err(ContractError::ContractPaused);",
                "        }",
                "",
                "        // Block height correlates the submitted and generated events.",
                "        let request_id = self.env().block_number() as u64;",
                f"        self.env().emit_event({request}Submitted {{",
                "            submitter: self.env().caller(),",
                "            request_id,",
                "        });",
                "",
                "        let response = self.execute_contract_logic(request)?;",
                f"        self.env().emit_event({response}Generated {{",
                "            request_id,",
                "            success: true,",
                "        });",
                "",
                "        Ok(response)",
                "    }",
                "",
                f"    fn execute_contract_logic(&self, _request: {request}) -> Result<{response}> {{",
                "        // Placeholder values; the clause logic belongs here.",
                f"        Ok({response} {{",
            ]
        )
        lines.extend(
            f"            {p.field_name}: {default_value(p.target_type)},"
            for p in artifact.response.properties
            if p.name not in _TRANSIENT
        )
        lines.extend(["        })", "    }"])

    for storage_field in domain:
        lines.extend(
            [
                "",
                "    #[ink(message)]",
                f"    pub fn {_getter_name(storage_field)}(&self) -> {storage_field.rust_type} {{",
                f"        self.{storage_field.name}.clone()",
                "    }",
            ]
        )
    lines.append("}")
    return lines


def _render_tests(artifact: ContractArtifact) -> list[str]:
    name = artifact.contract_name
    lines = [
        "#[cfg(test)]",
        "mod tests {",
        "    use super::*;",
        "",
        "    #[ink::test]",
        "    fn default_works() {",
        f"        let contract = {name}::default();",
        "        assert_eq!(contract.is_paused(), false);",
        "    }",
        "",
        "    #[ink::test]",
        "    fn pause_works() {",
        f"        let mut contract = {name}::default();",
        "        assert_eq!(contract.pause(), Ok(()));",
        "        assert_eq!(contract.is_paused(), true);",
        "    }",
        "",
        "    #[ink::test]",
        "    fn unpause_works() {",
        f"        let mut contract = {name}::default();",
        "        assert_eq!(contract.pause(), Ok(()));",
        "        assert_eq!(contract.unpause(), Ok(()));",
        "        assert_eq!(contract.is_paused(), false);",
        "    }",
        "",
        "    #[ink::test]",
        "    fn pause_rejects_non_owner() {",
        "        let accounts = ink::env::test::default_accounts::<ink::env::DefaultEnvironment>();",
        f"        let mut contract = {name}::default();",
        "        ink::env::test::set_caller::<ink::env::DefaultEnvironment>(accounts.bob);",
        "        assert_eq!(contract.pause(), Err(ContractError::Unauthorized));",
        "        assert_eq!(contract.is_paused(), false);",
        "    }",
    ]
    if artifact.request is not None and artifact.response is not None:
        request = artifact.request
        lines.extend(
            [
                "",
                "    #[ink::test]",
                "    fn process_request_rejected_while_paused() {",
                f"        let mut contract = {name}::default();",
                f"        let request = {request.name} {{",
            ]
        )
        lines.extend(
            f"            {p.field_name}: {default_value(p.target_type)},"
            for p in request.properties
            if p.name not in _TRANSIENT
        )
        lines.extend(
            [
                "        };",
                "        assert_eq!(contract.pause(), Ok(()));",
                "        assert_eq!(contract.process_request(request.clone()), Err(ContractError::ContractPaused));",
                "        assert_eq!(contract.unpause(), Ok(()));",
                "        assert!(contract.process_request(request).is_ok());",
                "    }",
            ]
        )
    lines.append("}")
    return lines


def _render_lib_rs(artifact: ContractArtifact) -> str:
    body: list[str] = [
        "use ink::prelude::string::String;",
        "use ink::prelude::vec::Vec;",
        "",
        "#[derive(Debug, PartialEq, Eq, scale::Encode, scale::Decode)]",
        '#[cfg_attr(feature = "std", derive(scale_info::TypeInfo))]',
        "pub enum ContractError {",
    ]
    body.extend(f"    {kind.value}," for kind in artifact.errors)
    body.extend(["}", "", "pub type Result<T> = core::result::Result<T, ContractError>;"])
    for structure in artifact.data_structures:
        body.append("")
        body.extend(_render_data_structure(structure))
    body.append("")
    body.extend(_render_storage(artifact))
    for event in artifact.events:
        body.append("")
        body.extend(_render_event(event))
    body.append("")
    body.extend(_render_impl(artifact))
    body.append("")
    body.extend(_render_tests(artifact))

    lines = [
        '#![cfg_attr(not(feature = "std"), no_std, no_main)]',
        "",
        "#[ink::contract]",
        f"mod {artifact.module_name} {{",
        *_indent(body, 1),
        "}",
    ]
    return "\n".join(lines) + "\n"


def _render_readme(artifact: ContractArtifact) -> str:
    lines = [
        f"# {artifact.contract_name} - ink! Smart Contract",
        "",
        "This ink! smart contract was generated from Concerto models by ctogen.",
        "",
        "## Overview",
        "",
    ]
    if artifact.template_model is not None:
        lines.append(
            f"This contract implements the **{artifact.template_model.name}** template model "
            "with the following properties:"
        )
        lines.append("")
        lines.extend(
            f"- **{p.name}**: {p.declared_type}"
            for p in artifact.template_model.properties
            if p.name not in METADATA_PROPERTIES
        )
    else:
        lines.append("No template model was found; the contract only carries ownership and pause state.")
    lines.extend(
        [
            "",
            "## Contract Features",
            "",
            "- **Pausable**: Contract can be paused/unpaused by the owner",
            "- **Access Control**: Owner-based permissions",
            "- **Event Emission**: All important actions emit events",
        ]
    )
    if artifact.has_request_processing:
        lines.append(f"- **Request Processing**: Handles {artifact.request.name} requests")
        lines.append(f"- **Response Generation**: Generates {artifact.response.name} responses")
    lines.extend(
        [
            "",
            "## Building and Testing",
            "",
            "```bash",
            "cargo install cargo-contract --force",
            "cargo contract build",
            "cargo test",
            "```",
            "",
            "## Contract API",
            "",
            "### Messages",
            "",
        ]
    )
    for message in artifact.messages:
        params = ", ".join(f"{n}: {t}" for n, t in message.params)
        lines.append(f"- `{message.name}({params})`: {message.description}")
    lines.extend(["", "### Events", ""])
    lines.extend(f"- `{event.name}`: {event.description}" for event in artifact.events)
    lines.extend(["", "### Errors", ""])
    lines.extend(f"- `{kind.value}`" for kind in artifact.errors)
    if artifact.template_models:
        lines.extend(["", "## Generated from Concerto Models", ""])
        lines.extend(f"- {tm.fully_qualified_name}" for tm in artifact.template_models)
    return "\n".join(lines) + "\n"


_CARGO_TOML = """\
[package]
name = "{package_name}"
version = "0.1.0"
authors = ["[your_name] <[your_email]>"]
edition = "2021"

[dependencies]
ink = {{ version = "{ink_version}", default-features = false }}
scale = {{ package = "parity-scale-codec", version = "3", default-features = false, features = ["derive"] }}
scale-info = {{ version = "2.6", default-features = false, features = ["derive"], optional = true }}

[dev-dependencies]
ink_e2e = {{ version = "{ink_version}" }}

[lib]
path = "src/lib.rs"

[features]
default = ["std"]
std = [
    "ink/std",
    "scale/std",
    "scale-info/std",
]
ink-as-dependency = []
e2e-tests = []

[profile.release]
overflow-checks = false

[profile.dev]
overflow-checks = false
"""
