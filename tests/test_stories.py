"""Tests for story module parsing."""

from __future__ import annotations

from storydoc.models import Expression, FrameworkKind
from storydoc.stories import (
    extract_story_examples,
    parse_story_file,
    resolve_component_file,
    story_name_from_export,
    to_story_id,
)

ANGULAR_COMPONENT = """
import { Component, Input } from '@angular/core';

@Component({
  selector: 'app-button',
  template: `<button [disabled]="disabled">{{ label }}</button>`,
})
export class ButtonComponent {
  @Input() label: string = 'Button';
  @Input() disabled = false;
}
"""

ANGULAR_STORIES = """
import type { Meta, StoryObj } from '@storybook/angular';
import { fn } from '@storybook/test';
import { ButtonComponent } from './button.component';

const meta: Meta<ButtonComponent> = {
  title: 'Example/Button',
  component: ButtonComponent,
  tags: ['autodocs'],
  args: { onClick: fn() },
  argTypes: {
    backgroundColor: { control: 'color' },
  },
};

export default meta;
type Story = StoryObj<ButtonComponent>;

export const Primary: Story = {
  args: {
    label: 'Click me',
    disabled: false,
  },
};

export const Large: Story = {
  name: 'Large button',
  args: {
    ...Primary.args,
    size: 'large',
  },
};

export const Custom: Story = {
  args: { label: `Hi ${name}` },
  render: (args) => ({ props: args }),
};
"""


def test_extract_story_examples_reads_csf3_module(project) -> None:
    project.write({"src/button.stories.ts": ANGULAR_STORIES})

    info = extract_story_examples(project.path("src/button.stories.ts"))

    assert info is not None
    assert info.imports == [
        "import type { Meta, StoryObj } from '@storybook/angular';",
        "import { fn } from '@storybook/test';",
        "import { ButtonComponent } from './button.component';",
    ]
    assert info.meta.title == "Example/Button"
    assert info.meta.component == "ButtonComponent"
    assert info.meta.component_path == "./button.component"
    assert info.meta.tags == ["autodocs"]
    assert info.meta.args == {"onClick": Expression("fn()")}
    assert info.meta.arg_types == {"backgroundColor": {"control": "color"}}

    assert list(info.stories) == ["Primary", "Large", "Custom"]
    primary = info.stories["Primary"]
    assert primary.name == "Primary"
    assert primary.args == {"label": "Click me", "disabled": False}
    assert primary.render is None

    large = info.stories["Large"]
    assert large.name == "Large button"
    assert large.args == {"label": "Click me", "disabled": False, "size": "large"}

    custom = info.stories["Custom"]
    assert custom.args == {"label": Expression("`Hi ${name}`")}
    assert custom.render == "(args) => ({ props: args })"


def test_story_file_info_serialises_expressions(project) -> None:
    project.write({"src/button.stories.ts": ANGULAR_STORIES})

    info = extract_story_examples(project.path("src/button.stories.ts"))

    assert info is not None
    payload = info.to_dict()
    assert payload["meta"]["args"] == {"onClick": {"__expression__": "fn()"}}
    assert payload["stories"]["Custom"]["args"] == {"label": {"__expression__": "`Hi ${name}`"}}


def test_extract_story_examples_reads_csf2_templates_and_filters(project) -> None:
    project.write(
        {
            "src/Button.stories.jsx": """
            import React from 'react';
            import { Button } from './Button';

            export default {
              title: 'Legacy/Button',
              component: Button,
              excludeStories: /.*Data$/,
            };

            export const actionsData = { onClick: () => {} };

            const Template = (args) => <Button {...args} />;

            export const Primary = Template.bind({});
            Primary.args = { primary: true, label: 'Button' };
            Primary.storyName = 'Primary CTA';

            export const WithCount = Template.bind({});
            WithCount.args = { ...Primary.args, count: 3 };

            export function Plain() {
              return <Button label="Plain" />;
            }
            """,
        }
    )

    info = extract_story_examples(project.path("src/Button.stories.jsx"))

    assert info is not None
    assert info.meta.component_path == "./Button"
    assert list(info.stories) == ["Primary", "WithCount", "Plain"]

    primary = info.stories["Primary"]
    assert primary.name == "Primary CTA"
    assert primary.args == {"primary": True, "label": "Button"}
    assert primary.render == "(args) => <Button {...args} />"

    assert info.stories["WithCount"].args == {"primary": True, "label": "Button", "count": 3}
    assert info.stories["WithCount"].name == "With Count"

    plain = info.stories["Plain"]
    assert plain.args == {}
    assert plain.render is not None and plain.render.startswith("function Plain()")


def test_extract_story_examples_honours_include_stories(project) -> None:
    project.write(
        {
            "src/Tabs.stories.tsx": """
            import { Tabs } from './Tabs';

            const meta = {
              component: Tabs,
              includeStories: ['Basic'],
            };
            export { meta as default };

            export const Basic = { args: { count: -2, ratio: 0.5, items: ['a', 'b'], extra: null } };
            export const Hidden = { args: {} };
            export const __namedExportsOrder = ['Basic', 'Hidden'];
            """,
        }
    )

    info = extract_story_examples(project.path("src/Tabs.stories.tsx"))

    assert info is not None
    assert info.meta.title is None
    assert info.meta.component == "Tabs"
    assert list(info.stories) == ["Basic"]
    assert info.stories["Basic"].args == {"count": -2, "ratio": 0.5, "items": ["a", "b"], "extra": None}


def test_extract_story_examples_returns_empty_stories_for_meta_only_module(project) -> None:
    project.write(
        {
            "src/Button.stories.ts": """
            import type { Meta } from '@storybook/react';
            import { Button } from './Button';

            const meta = {
              title: 'Example/Button',
              component: Button,
            } satisfies Meta<typeof Button>;

            export default meta;
            """,
        }
    )

    info = extract_story_examples(project.path("src/Button.stories.ts"))

    assert info is not None
    assert info.stories == {}
    assert len(info.imports) == 2
    assert info.meta.title == "Example/Button"
    assert info.meta.component == "Button"


def test_extract_story_examples_decodes_string_escapes(project) -> None:
    project.write(
        {
            "src/Emoji.stories.ts": r"""
            import { Emoji } from './Emoji';

            export default { component: Emoji };

            export const Party = {
              args: {
                label: '\u{1F600} party',
                pair: "\uD83D\uDE00",
                accent: '\x41\u00e9',
                lines: 'one\ntwo\ttabbed',
                quoted: 'it\'s',
              },
            };
            """,
        }
    )

    info = extract_story_examples(project.path("src/Emoji.stories.ts"))

    assert info is not None
    assert info.stories["Party"].args == {
        "label": "\U0001F600 party",
        "pair": "\U0001F600",
        "accent": "Aé",
        "lines": "one\ntwo\ttabbed",
        "quoted": "it's",
    }


def test_extract_story_examples_reads_mdx_docs(project) -> None:
    project.write(
        {
            "src/Button.mdx": """
            import { Meta, Canvas } from '@storybook/blocks';
            import * as ButtonStories from './Button.stories';

            <Meta of={ButtonStories} />

            # Button

            <Canvas of={ButtonStories.Primary} />
            """,
        }
    )

    info = extract_story_examples(project.path("src/Button.mdx"))

    assert info is not None
    assert info.imports == [
        "import { Meta, Canvas } from '@storybook/blocks';",
        "import * as ButtonStories from './Button.stories';",
    ]
    assert info.meta.component == "ButtonStories"
    assert info.stories == {}


def test_extract_story_examples_returns_none_for_missing_file(tmp_path) -> None:
    assert extract_story_examples(tmp_path / "Missing.stories.ts") is None
    assert parse_story_file(tmp_path / "Missing.stories.ts", "x--y", tmp_path) is None


def test_parse_story_file_merges_meta_args_and_reads_component(project) -> None:
    project.write(
        {
            "src/button.component.ts": ANGULAR_COMPONENT,
            "src/button.stories.ts": ANGULAR_STORIES,
        }
    )

    details = parse_story_file(
        project.path("src/button.stories.ts"),
        "example-button--primary",
        project.path(),
        FrameworkKind.ANGULAR,
    )

    assert details is not None
    assert details.component == "ButtonComponent"
    assert details.story_name == "Primary"
    assert details.args == {"onClick": Expression("fn()"), "label": "Click me", "disabled": False}
    assert details.arg_types == {"backgroundColor": {"control": "color"}}
    assert details.component_docs is not None
    assert details.component_docs.selector == "app-button"
    assert [prop.name for prop in details.component_docs.properties] == ["label", "disabled"]


def test_parse_story_file_returns_empty_args_for_unmatched_story(project) -> None:
    project.write({"src/button.stories.ts": ANGULAR_STORIES})

    details = parse_story_file(project.path("src/button.stories.ts"), "example-button--docs", project.path())

    assert details is not None
    assert details.component == "ButtonComponent"
    assert details.args == {}
    assert details.arg_types == {}
    assert details.story_name is None
    assert details.component_docs is None


def test_resolve_component_file_tries_extensions_in_order(project) -> None:
    project.write(
        {
            "src/Button/index.tsx": "export const Button = () => <button />;\n",
            "src/Card.vue": "<template><div /></template>\n",
        }
    )
    story_dir = project.path("src")

    assert resolve_component_file(story_dir, "./Button") == project.path("src/Button/index.tsx").resolve()
    assert resolve_component_file(story_dir, "./Card.vue") == project.path("src/Card.vue").resolve()
    assert resolve_component_file(story_dir, "./Missing") is None
    assert resolve_component_file(story_dir, "@acme/ui") is None
    assert resolve_component_file(story_dir, None) is None


def test_story_ids_follow_storybook_naming() -> None:
    assert story_name_from_export("primaryButton") == "Primary Button"
    assert story_name_from_export("WithIcon2") == "With Icon 2"
    assert to_story_id("Example/Button", "Primary") == "example-button--primary"
    assert to_story_id("Components/Data Table", "HTMLView") == "components-data-table--html-view"
