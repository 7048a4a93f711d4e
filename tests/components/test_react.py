"""Tests for the React component strategy."""

from __future__ import annotations

from storydoc.components import extract_component_docs
from storydoc.models import FrameworkKind


def test_react_strategy_reads_typed_arrow_component(project) -> None:
    project.write(
        {
            "src/Button.tsx": """
            import React from 'react';

            export interface ButtonProps {
              /** Is this the principal call to action on the page? */
              primary?: boolean;
              /** How large should the button be? */
              size?: 'small' | 'medium' | 'large';
              /** Button contents */
              label: string;
              onClick?: () => void;
            }

            /** Primary UI component for user interaction */
            export const Button = ({ primary = false, size = 'medium', label, ...props }: ButtonProps) => {
              const mode = primary ? 'storybook-button--primary' : 'storybook-button--secondary';
              return (
                <button type="button" className={mode} {...props}>
                  {label}
                </button>
              );
            };
            """,
        }
    )

    doc = extract_component_docs(project.path("src/Button.tsx"), FrameworkKind.REACT)

    assert doc is not None
    assert doc.selector == "Button"
    assert doc.description == "Primary UI component for user interaction"
    assert doc.template is not None
    assert doc.template.startswith('<button type="button" className={mode} {...props}>')
    assert doc.template.endswith("</button>")
    assert doc.component_code is not None and doc.component_code.startswith("export const Button")

    props = {prop.name: prop for prop in doc.properties}
    assert list(props) == ["primary", "size", "label", "onClick"]
    assert props["primary"].type == "boolean"
    assert props["primary"].default_value == "false"
    assert props["primary"].description == "Is this the principal call to action on the page?"
    assert props["size"].type == "'small' | 'medium' | 'large'"
    assert props["size"].default_value == "'medium'"
    assert props["label"].required is True
    assert props["label"].description == "Button contents"
    assert props["onClick"].type == "() => void"
    assert props["onClick"].required is False


def test_react_strategy_reads_forward_ref_generic_props(project) -> None:
    project.write(
        {
            "src/TextInput.tsx": """
            import * as React from 'react';

            type InputProps = {
              placeholder?: string;
              invalid?: boolean;
            };

            export const TextInput = React.forwardRef<HTMLInputElement, InputProps>(({ placeholder = 'Type here', invalid }, ref) => (
              <input ref={ref} placeholder={placeholder} aria-invalid={invalid} />
            ));
            """,
        }
    )

    doc = extract_component_docs(project.path("src/TextInput.tsx"))

    assert doc is not None
    assert doc.framework is FrameworkKind.REACT
    assert doc.selector == "TextInput"
    assert doc.template == "<input ref={ref} placeholder={placeholder} aria-invalid={invalid} />"
    assert [(prop.name, prop.type, prop.default_value) for prop in doc.properties] == [
        ("placeholder", "string", "'Type here'"),
        ("invalid", "boolean", None),
    ]


def test_react_strategy_reads_prop_types_and_default_props(project) -> None:
    project.write(
        {
            "src/Avatar.jsx": """
            import PropTypes from 'prop-types';

            // Round user picture.
            export function Avatar({ src, size }) {
              return <img src={src} width={size} />;
            }

            Avatar.propTypes = {
              /** Image URL */
              src: PropTypes.string.isRequired,
              size: PropTypes.number,
            };

            Avatar.defaultProps = {
              size: 32,
            };
            """,
        }
    )

    doc = extract_component_docs(project.path("src/Avatar.jsx"), "react")

    assert doc is not None
    assert doc.selector == "Avatar"
    assert doc.description == "Round user picture."
    assert doc.template == "<img src={src} width={size} />"
    src, size = doc.properties
    assert (src.name, src.type, src.required, src.description) == ("src", "string", True, "Image URL")
    assert (size.name, size.type, size.default_value, size.required) == ("size", "number", "32", False)


def test_react_strategy_reads_class_component_generic(project) -> None:
    project.write(
        {
            "src/Card.tsx": """
            import React from 'react';

            interface CardProps {
              title: string;
              elevated?: boolean;
            }

            export default class Card extends React.Component<CardProps> {
              static defaultProps = { elevated: true };

              render() {
                return <section className="card">{this.props.title}</section>;
              }
            }
            """,
        }
    )

    doc = extract_component_docs(project.path("src/Card.tsx"))

    assert doc is not None
    assert doc.selector == "Card"
    assert doc.template == '<section className="card">{this.props.title}</section>'
    title, elevated = doc.properties
    assert (title.name, title.type, title.required) == ("title", "string", True)
    assert (elevated.name, elevated.default_value, elevated.required) == ("elevated", "true", False)


def test_react_strategy_uses_default_export_of_local_component(project) -> None:
    project.write(
        {
            "src/Tag.jsx": """
            const palette = { blue: '#00f' };

            const Tag = ({ text, color = 'blue' }) => <span style={{ color: palette[color] }}>{text}</span>;

            export default Tag;
            """,
        }
    )

    doc = extract_component_docs(project.path("src/Tag.jsx"))

    assert doc is not None
    assert doc.selector == "Tag"
    assert [(prop.name, prop.type, prop.default_value) for prop in doc.properties] == [
        ("text", None, None),
        ("color", "string", "'blue'"),
    ]


def test_react_strategy_ignores_modules_without_components(project) -> None:
    project.write({"src/format.ts": "export const formatDate = (value: Date) => value.toISOString();\n"})

    assert extract_component_docs(project.path("src/format.ts")) is None
