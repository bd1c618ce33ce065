"""Gradio UI: generation form, gallery and image detail view."""
