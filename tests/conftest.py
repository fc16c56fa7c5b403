"""Shared test fixtures and sample sources."""

from pathlib import Path

import pytest

from src.mapping.compiler.property_registry import ConditionMergePolicy
from src.mapping.extractor import ExtractionOptions, MappingExtractor

GLOW_SOURCE = r"""
using UnityEditor;
using UnityEngine;

public class JuneEditor : ShaderGUI
{
    private const string kGlowName = "Glow";
    private const string kRimLabel = "Rim Light";
    private const float kMaxStrength = 4f;

    public enum BlendMode
    {
        [InspectorName("Additive Blend")] Additive,
        Multiply,
        [InspectorName("Screen")] Screen,
    }

    private void DrawHeader()
    {
        var ignored = serializedObject.FindProperty("_Ignored");
        EditorGUILayout.FloatField(ignored, "Ignored");
    }

    public override void OnGUI(MaterialEditor materialEditor, MaterialProperty[] properties)
    {
        DrawHeader();

        june.makeEffect(style, 0, ref glowToggle, ref glowOpen, 1, kGlowName, 0, 0, 0, 0, "_GLOW_ON", 0, "GLOW");
        if (glowToggle)
        {
            var glowColor = serializedObject.FindProperty("_GlowColor");
            EditorGUILayout.ColorField(glowColor, new GUIContent("Glow Color", "Tint of the glow"), new Color(1f, 0.5f, 0f, 1f));

            var strength = serializedObject.FindProperty("_GlowStrength");
            strength.floatValue = EditorGUILayout.Slider("Strength", strength.floatValue, 0f, kMaxStrength);

            var blend = serializedObject.FindProperty("_GlowBlend");
            EditorGUILayout.EnumPopup<BlendMode>(blend, "Blend");
            if (blend.intValue >= 1)
            {
                doIndentUp();
                var soft = serializedObject.FindProperty("_GlowSoftness");
                EditorGUILayout.FloatField(soft, "Softness");
                doIndentDown();
            }

            detailOpen = june.makeSubEffect(style, "Detail", ref detailOpen, 2);
            if (detailOpen)
            {
                var mask = serializedObject.FindProperty("_DetailMask");
                EditorGUILayout.TextureField(mask, "Detail Mask");
            }
        }

        june.makeEffect(style, 0, ref rimToggle, ref rimOpen, 2, "Rim", 0, 0, 0, 0, "_RIM_ON", 0, "RIM");
        var rimMode = serializedObject.FindProperty("_RimMode");
        EditorGUILayout.Popup(rimMode, kRimLabel);
        switch (rimMode.intValue)
        {
            case 0:
                var rimWidth = serializedObject.FindProperty("_RimWidth");
                EditorGUILayout.FloatField(rimWidth, "Width");
                break;
            case 1:
            case 2:
                var rimColor = serializedObject.FindProperty("_RimColor");
                EditorGUILayout.ColorField(rimColor, "Rim Color");
                break;
            default:
                break;
        }
    }
}
"""

GLOW_SHADER = """
Shader "June/Glow"
{
    Properties
    {
        [HDR] _GlowColor ("Glow Color", Color) = (1, 0.5, 0, 1)
        _GlowStrength ("Glow Strength", Range(0, 8)) = 1
        _RimWidth ("Rim Width", Float) = 0.25 // outline
        _DetailMask ("Detail Mask", 2D) = "white" {}
    }
}
"""


@pytest.fixture
def extraction_options() -> ExtractionOptions:
    """Options that ignore JUNE_MAPPING_* environment overrides."""
    return ExtractionOptions(policy=ConditionMergePolicy.LAST_UNCONDITIONAL_WINS)


@pytest.fixture
def extractor(extraction_options) -> MappingExtractor:
    return MappingExtractor(extraction_options)


@pytest.fixture
def june_project(tmp_path) -> Path:
    """A project tree with the editor script two levels below its shaders.

    Returns the editor script path.
    """
    shader_dir = tmp_path / "June" / "Shaders"
    shader_dir.mkdir(parents=True)
    (shader_dir / "Glow.shader").write_text(GLOW_SHADER, encoding="utf-8")

    editor_dir = tmp_path / "June" / "Scripts" / "Editor"
    editor_dir.mkdir(parents=True)
    source = editor_dir / "JuneEditor.cs"
    source.write_text(GLOW_SOURCE, encoding="utf-8")
    return source
