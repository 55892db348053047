"""
Generation Prompts
System prompts and per-target instruction blocks for application generation.
"""

import orjson

from .models import Target

# ============================================================================
# Application Model Schema
# ============================================================================

APP_MODEL_SCHEMA = """{
  "name": "App Name",
  "description": "Brief description",
  "platforms": ["ios", "android", "react-native", "web"],
  "screens": [
    {
      "id": "screen-id",
      "name": "ScreenName",
      "components": [
        {
          "id": "component-id",
          "type": "ComponentType",
          "props": {},
          "children": [],
          "bindings": {"value": {"type": "state", "source": "stateId"}}
        }
      ],
      "navigation": {"type": "push", "target": "other-screen-id"},
      "localState": []
    }
  ],
  "navigation": {
    "type": "stack|tab|split|drawer",
    "structure": [{"id": "nav-id", "name": "Home", "screenId": "screen-id"}],
    "initialRoute": "screen-id"
  },
  "theme": {
    "colors": {
      "primary": "#007AFF",
      "secondary": "#5856D6",
      "accent": "#FF9500",
      "background": "#FFFFFF",
      "surface": "#F2F2F7",
      "text": "#000000"
    },
    "typography": {"sizes": {"h1": 32, "h2": 24, "h3": 20, "body": 16, "caption": 12}},
    "spacing": {"xs": 4, "sm": 8, "md": 16, "lg": 24, "xl": 32}
  },
  "dataModels": [
    {
      "id": "model-id",
      "name": "ModelName",
      "fields": [{"name": "title", "type": "string", "required": true}],
      "relationships": [{"type": "one-to-many", "target": "other-model-id", "field": "items"}]
    }
  ],
  "globalState": [{"id": "state-id", "name": "items", "type": "array", "scope": "global"}],
  "features": [{"id": "auth", "name": "Authentication", "enabled": true}],
  "permissions": [{"id": "camera", "name": "Camera", "description": "Scan receipts", "required": false}]
}"""


def get_app_model_prompt() -> str:
    """
    System prompt for the Application Model call.

    Returns:
        Instructions declaring the exact JSON shape expected back
    """
    return f"""You are an expert mobile app architect. Create a comprehensive app definition in JSON format.

The JSON must follow this structure:
{APP_MODEL_SCHEMA}

Rules:
1. Field types: string, number, boolean, date, datetime, array, object, image, file, reference
2. Every navigation item needs a screenId or a non-empty children list
3. The six theme colors are required
4. Define at least 3 screens

Respond with ONLY valid JSON, no additional text."""


# ============================================================================
# Per-Target Instruction Blocks
# ============================================================================

TARGET_SYSTEM_PROMPTS: dict[Target, str] = {
    Target.IOS: (
        "You are an expert iOS developer. Generate a complete SwiftUI application "
        "from the app definition you are given. Use SwiftUI views (VStack, HStack, List, "
        "Button, TextField) with NavigationStack or TabView."
    ),
    Target.ANDROID: (
        "You are an expert Android developer. Generate a complete Jetpack Compose application "
        "from the app definition you are given. Use Compose (Column, Row, LazyColumn, Button, "
        "TextField) with NavHost and bottom navigation."
    ),
    Target.REACT_NATIVE: (
        "You are an expert React Native developer. Generate a complete Expo application "
        "from the app definition you are given. Use React Native components (View, Text, "
        "TextInput, TouchableOpacity) with React Navigation stacks and tabs."
    ),
}

TARGET_INSTRUCTIONS: dict[Target, str] = {
    Target.IOS: """Requirements:
1. Use SwiftUI with @Observable or @StateObject
2. Implement all screens with proper navigation
3. Use proper SwiftUI components
4. Include data models if defined
5. Add proper error handling
6. Follow iOS Human Interface Guidelines

Generate the complete source code in a single response. Include:
- App entry point
- All screen views
- ViewModels if needed
- Models
- Services
- Extensions""",
    Target.ANDROID: """Requirements:
1. Use Jetpack Compose with Material 3
2. Implement all screens with proper navigation using NavHost
3. Use proper Compose components
4. Include data models with Kotlin data classes
5. Add proper error handling
6. Follow Material Design 3 guidelines

Generate the complete source code in a single response. Include:
- MainActivity and Application class
- All screen composables
- ViewModels if needed
- Data models
- Repository pattern
- Navigation setup""",
    Target.REACT_NATIVE: """Requirements:
1. Use React Native with Expo
2. Implement all screens with React Navigation
3. Use proper React Native components
4. Include TypeScript interfaces
5. Add proper error handling
6. Follow React Native best practices

Generate the complete source code in a single response. Include:
- App.tsx entry point
- All screen components
- Navigation setup
- TypeScript interfaces
- Theme configuration""",
}

TARGET_TITLES: dict[Target, str] = {
    Target.IOS: "Generate a complete SwiftUI iOS application.",
    Target.ANDROID: "Generate a complete Jetpack Compose Android application.",
    Target.REACT_NATIVE: "Generate a complete React Native Expo application.",
}


def get_target_prompt(target: Target, app_json: str) -> str:
    """
    Build the user prompt for one target emitter.

    Args:
        target: Native or cross-platform target
        app_json: Full Application Model as indented JSON

    Returns:
        Title, the model restated verbatim, then the target instruction block
    """
    return "\n\n".join([
        TARGET_TITLES[target],
        f"APP DEFINITION:\n{app_json}",
        TARGET_INSTRUCTIONS[target],
    ])


# ============================================================================
# Web Specification
# ============================================================================

WEB_SPEC_FORMAT = """{
  "name": "AppName",
  "description": "...",
  "stack": "nextjs|fastapi|react-express|vue",
  "pages": ["page1", "page2"],
  "components": ["Component1", "Component2"],
  "apiEndpoints": ["/api/endpoint1", "/api/endpoint2"],
  "database": {"tables": [{"name": "table", "fields": [{"name": "id"}]}]},
  "features": ["auth", "crud", "realtime"]
}"""


def get_web_spec_prompt(requirements: str, stack_profile: dict[str, str]) -> str:
    """
    System prompt for the web specification phase.

    Args:
        requirements: Natural-language app description
        stack_profile: Stack conventions (framework, language, styling, ...)

    Returns:
        Complete system prompt
    """
    stack_json = orjson.dumps(stack_profile, option=orjson.OPT_INDENT_2).decode("utf-8")
    return f"""You are an expert full-stack web developer. Generate a complete web application based on the following requirements:

APP REQUIREMENTS:
{requirements}

TECH STACK:
{stack_json}

Generate a detailed specification including:
1. Project structure
2. Database schema (if needed)
3. API endpoints (if backend)
4. Frontend pages and components
5. Authentication flow
6. State management

Respond with valid JSON in this format:
{WEB_SPEC_FORMAT}

Respond with ONLY valid JSON, no additional text."""
