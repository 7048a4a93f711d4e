"""Tests for the Vue single-file component strategy."""

from __future__ import annotations

from storydoc.components import extract_component_docs
from storydoc.models import FrameworkKind


def test_vue_strategy_reads_script_setup_with_type_props(project) -> None:
    project.write(
        {
            "src/greeting-banner.vue": """
            <!-- A friendly greeting banner. -->
            <template>
              <div class="banner" :class="{ compact }">
                <h1>{{ title }}</h1>
                <template v-if="subtitle">
                  <p>{{ subtitle }}</p>
                </template>
              </div>
            </template>

            <script setup lang="ts">
            interface Props {
              /** Main heading */
              title: string
              subtitle?: string
              compact?: boolean
            }

            const props = withDefaults(defineProps<Props>(), {
              compact: false,
            })
            </script>
            """,
        }
    )

    doc = extract_component_docs(project.path("src/greeting-banner.vue"), FrameworkKind.VUE)

    assert doc is not None
    assert doc.framework is FrameworkKind.VUE
    assert doc.selector == "GreetingBanner"
    assert doc.description == "A friendly greeting banner."
    assert doc.template is not None
    assert doc.template.startswith('<div class="banner" :class="{ compact }">')
    assert doc.template.endswith("</div>")
    assert "<template v-if=\"subtitle\">" in doc.template
    assert doc.component_code is not None and "defineProps<Props>()" in doc.component_code

    title, subtitle, compact = doc.properties
    assert (title.name, title.type, title.required, title.description) == ("title", "string", True, "Main heading")
    assert (subtitle.name, subtitle.required) == ("subtitle", False)
    assert (compact.name, compact.type, compact.default_value) == ("compact", "boolean", "false")


def test_vue_strategy_reads_options_api_props(project) -> None:
    project.write(
        {
            "src/LegacyButton.vue": """
            <template><button>{{ label }}</button></template>

            <script lang="ts">
            import { defineComponent, PropType } from 'vue';

            /** Options API button. */
            export default defineComponent({
              name: 'LegacyButton',
              props: {
                label: { type: String, required: true },
                size: { type: [String, Number], default: 'md' },
                items: { type: Array as PropType<string[]>, default: () => [] },
                disabled: Boolean,
              },
            })
            </script>
            """,
        }
    )

    doc = extract_component_docs(project.path("src/LegacyButton.vue"))

    assert doc is not None
    assert doc.selector == "LegacyButton"
    assert doc.template == "<button>{{ label }}</button>"
    assert doc.description == "Options API button."
    props = {prop.name: prop for prop in doc.properties}
    assert list(props) == ["label", "size", "items", "disabled"]
    assert (props["label"].type, props["label"].required) == ("string", True)
    assert (props["size"].type, props["size"].default_value) == ("string | number", "'md'")
    assert (props["items"].type, props["items"].default_value) == ("string[]", "() => []")
    assert (props["disabled"].type, props["disabled"].required) == ("boolean", False)


def test_vue_strategy_reads_runtime_define_props_array(project) -> None:
    project.write(
        {
            "src/Chip.vue": """
            <script setup>
            defineProps(['text', 'closable'])
            </script>

            <template>
              <span class="chip">{{ text }}</span>
            </template>
            """,
        }
    )

    doc = extract_component_docs(project.path("src/Chip.vue"), "vue")

    assert doc is not None
    assert doc.selector == "Chip"
    assert doc.template == '<span class="chip">{{ text }}</span>'
    assert [prop.name for prop in doc.properties] == ["text", "closable"]


def test_vue_strategy_merges_destructured_defaults(project) -> None:
    project.write(
        {
            "src/Counter.vue": """
            <script setup lang="ts">
            const { start = 0, step } = defineProps<{ start?: number; step: number }>()
            </script>

            <template><output>{{ start }}</output></template>
            """,
        }
    )

    doc = extract_component_docs(project.path("src/Counter.vue"))

    assert doc is not None
    assert [(prop.name, prop.type, prop.default_value, prop.required) for prop in doc.properties] == [
        ("start", "number", "0", False),
        ("step", "number", None, True),
    ]
