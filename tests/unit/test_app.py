"""Unit tests for the Gradio app factory and entry point."""

import gradio as gr

from snapcanvas.ui import app as ui_app


class TestCreateUI:
    """Tests for create_ui."""

    def test_returns_blocks(self):
        assert isinstance(ui_app.create_ui(), gr.Blocks)

    def test_field_updater_binds_field(self, ui_state):
        button, _, state = ui_app._field_updater("negative_prompt")("blurry", ui_state)

        assert state.form.form.negative_prompt == "blurry"
        assert button["interactive"] is False

    def test_suggestion_inserter_binds_text(self, ui_state):
        prompt, _, state = ui_app._suggestion_inserter("a lighthouse")(ui_state)
        assert prompt == state.form.form.prompt == "a lighthouse"


class TestMain:
    """Tests for the snapcanvas-ui entry point."""

    def test_launches_with_config(self, test_config, monkeypatch):
        launched = {}

        def fake_launch(self, **kwargs):
            launched.update(kwargs)

        monkeypatch.setattr(ui_app, "config", test_config)
        monkeypatch.setattr(gr.Blocks, "launch", fake_launch)

        ui_app.main()

        assert launched["server_name"] == test_config.gradio_server_name
        assert launched["server_port"] == test_config.gradio_server_port
        assert launched["share"] is False
        assert launched["allowed_paths"] == [str(test_config.downloads_path)]
