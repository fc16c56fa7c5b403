"""Mapping validator - checks referential integrity of a MappingDocument.

Ensures every section parent and property index a module refers to
actually exists in that module. This catches bugs where extraction
produces a document whose sections point at nothing.
"""

from dataclasses import dataclass, field

from src.models.mapping_document import MappingDocument, MappingModule


@dataclass
class ValidationError:
    """A single validation error."""

    path: str  # Where in the document the error occurred
    message: str  # What's wrong


@dataclass
class ValidationResult:
    """Result of validating a document."""

    errors: list[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, path: str, message: str) -> None:
        self.errors.append(ValidationError(path=path, message=message))


class MappingValidator:
    """Validates a MappingDocument for internal consistency."""

    def __init__(self, document: MappingDocument):
        self.document = document
        self.result = ValidationResult()

    def validate(self) -> ValidationResult:
        """Run all validations and return result."""
        for i, module in enumerate(self.document.modules):
            self._validate_module(module, f"modules[{i}]")
        return self.result

    def _validate_module(self, module: MappingModule, path: str) -> None:
        sections_by_name = {}
        for i, section in enumerate(module.sections):
            if section.name in sections_by_name:
                self.result.add_error(f"{path}.sections[{i}]", f"Duplicate section name '{section.name}'")
            sections_by_name[section.name] = section

        for i, section in enumerate(module.sections):
            section_path = f"{path}.sections[{i}]"

            if section.parent_section is not None:
                parent = sections_by_name.get(section.parent_section)
                if parent is None:
                    self.result.add_error(
                        section_path,
                        f"References undefined parent section '{section.parent_section}'. "
                        f"Defined sections: {sorted(sections_by_name)}",
                    )
                elif section.indent_level != parent.indent_level + 1:
                    self.result.add_error(
                        section_path,
                        f"Indent level {section.indent_level} should be one more than "
                        f"parent '{parent.name}' ({parent.indent_level})",
                    )
            elif section.indent_level != 0:
                self.result.add_error(section_path, f"Root section has indent level {section.indent_level}")

            for index in section.property_indices:
                if not 0 <= index < len(module.properties):
                    self.result.add_error(
                        section_path,
                        f"Property index {index} out of range ({len(module.properties)} properties)",
                    )

        for i, prop in enumerate(module.properties):
            for j, rule in enumerate(prop.conditions):
                # model_construct bypasses the model validator
                if len(rule.paths) != len(rule.values):
                    self.result.add_error(
                        f"{path}.properties[{i}].conditions[{j}]",
                        f"{len(rule.paths)} paths but {len(rule.values)} values",
                    )


def validate_document(document: MappingDocument) -> ValidationResult:
    """Convenience function to validate a document."""
    return MappingValidator(document).validate()
