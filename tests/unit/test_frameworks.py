"""Tests for framework detection and rule validation."""

from __future__ import annotations

import json

import pytest

from envguard.frameworks import nextjs, sveltekit
from envguard.frameworks.detector import detect_framework
from envguard.frameworks.rules import UsageContext
from envguard.frameworks.t3env import (
    T3EnvSchema,
    detect_t3env,
    parse_t3env_schema,
    validate_t3env,
)
from envguard.frameworks.validator import RULE_TABLES, FrameworkValidator
from envguard.scanner.models import AccessPattern, Framework
from envguard.scanner.usage import scan_usages


def _reasons(warnings):
    return [w.reason for w in warnings]


class TestNextJs:
    def setup_method(self):
        self.validator = FrameworkValidator(Framework.NEXTJS)

    def test_public_variable_in_server_file(self, make_usage):
        usage = make_usage("NEXT_PUBLIC_URL", file="app/route.server.ts")
        warnings = self.validator.validate(usage)
        assert len(warnings) == 1
        assert warnings[0].framework == Framework.NEXTJS
        assert warnings[0].reason == "NEXT_PUBLIC_ variable used in server-only file"

    @pytest.mark.parametrize(
        "path",
        ["app/api/users/route.ts", "pages/api/hello.ts", "middleware.ts", "src/lib/db.server.js"],
    )
    def test_server_only_paths(self, make_usage, path):
        warnings = self.validator.validate(make_usage("NEXT_PUBLIC_X", file=path))
        assert _reasons(warnings) == ["NEXT_PUBLIC_ variable used in server-only file"]

    def test_private_variable_in_use_client_file(self, make_usage):
        usage = make_usage("DATABASE_URL", file="app/page.tsx")
        texts = {"app/page.tsx": '"use client";\nexport default function Page() {}\n'}
        warnings = self.validator.validate(usage, texts)
        assert _reasons(warnings) == ["Server-only variable accessed from client code"]

    def test_directive_beyond_first_lines_ignored(self, make_usage):
        usage = make_usage("DATABASE_URL", file="app/page.tsx")
        texts = {"app/page.tsx": "\n" * 12 + '"use client";\n'}
        assert self.validator.validate(usage, texts) == []

    def test_directive_on_context_line(self, make_usage):
        usage = make_usage("SECRET", file="app/x.tsx", context="'use client'; process.env.SECRET")
        assert _reasons(self.validator.validate(usage)) == [
            "Server-only variable accessed from client code"
        ]

    def test_pages_router_data_fetching_is_server(self):
        content = (
            "export async function getServerSideProps() {\n"
            "  const db = process.env.DATABASE_URL;\n"
            "  return { props: {} };\n"
            "}\n"
        )
        usages = scan_usages(content, "pages/index.tsx")
        assert [u.variable for u in usages] == ["DATABASE_URL"]
        assert self.validator.validate_all(usages, {"pages/index.tsx": content}) == []

    def test_import_meta_env(self, make_usage):
        usage = make_usage("NEXT_PUBLIC_X", pattern=AccessPattern.IMPORT_META_ENV)
        assert _reasons(self.validator.validate(usage)) == [
            "Next.js uses process.env, not import.meta.env (Vite syntax)"
        ]

    def test_sensitive_public(self, make_usage):
        usage = make_usage("NEXT_PUBLIC_STRIPE_SECRET")
        assert _reasons(self.validator.validate(usage)) == ["Sensitive data marked as public"]

    def test_first_match_wins(self, make_usage):
        # Server-only and sensitive-public both apply; only the first is reported
        usage = make_usage("NEXT_PUBLIC_API_TOKEN", file="app/api/route.ts")
        assert _reasons(self.validator.validate(usage)) == [
            "NEXT_PUBLIC_ variable used in server-only file"
        ]

    def test_node_modules_skipped(self, make_usage):
        usage = make_usage("NEXT_PUBLIC_X", file="node_modules/pkg/route.server.ts")
        assert self.validator.validate(usage) == []

    def test_clean_usage(self, make_usage):
        assert self.validator.validate(make_usage("DATABASE_URL", file="lib/db.ts")) == []

    def test_client_file_helper(self, make_usage):
        ctx = UsageContext(usage=make_usage("A"), file="pages/api/x.ts")
        assert not nextjs.is_client_file(ctx)


class TestSvelteKit:
    def setup_method(self):
        self.validator = FrameworkValidator(Framework.SVELTEKIT)

    def _validate(self, content, path):
        usages = scan_usages(content, path)
        return self.validator.validate_all(usages, {path: content})

    def test_import_meta_without_vite_prefix(self):
        warnings = self._validate("import.meta.env.API_URL", "src/lib/api.ts")
        assert _reasons(warnings) == ['Variables accessed through import.meta.env must start with "VITE_"']

    def test_process_env_with_vite_prefix(self):
        warnings = self._validate("process.env.VITE_X", "src/hooks.server.ts")
        assert _reasons(warnings) == ['Variables accessed through process.env cannot start with "VITE_"']

    def test_process_env_in_component(self):
        warnings = self._validate("{process.env.API}", "src/routes/Widget.svelte")
        assert len(warnings) == 1
        assert "Svelte files" in warnings[0].reason

    def test_process_env_outside_server(self):
        warnings = self._validate("process.env.API", "src/lib/util.ts")
        assert _reasons(warnings) == ["process.env should only be used in server files"]

    def test_process_env_in_server_file_ok(self):
        assert self._validate("process.env.API", "src/routes/api/+server.ts") == []

    def test_dynamic_private_in_client(self):
        content = "import { env } from '$env/dynamic/private';\nenv.SECRET;\n"
        warnings = self._validate(content, "src/routes/+page.ts")
        assert _reasons(warnings) == ["$env/dynamic/private cannot be used in client-side code"]

    def test_dynamic_private_public_prefix(self):
        content = "import { env } from '$env/dynamic/private';\nenv.PUBLIC_THING;\n"
        warnings = self._validate(content, "src/routes/+page.server.ts")
        assert _reasons(warnings) == ['$env/dynamic/private variables must not start with "PUBLIC_"']

    def test_dynamic_public_without_prefix(self):
        content = "import { env } from '$env/dynamic/public';\nenv.THING;\n"
        warnings = self._validate(content, "src/routes/+page.ts")
        assert _reasons(warnings) == ['$env/dynamic/public variables must start with "PUBLIC_"']

    def test_static_private_in_component(self):
        content = "<script>\nimport { DB_URL } from '$env/static/private';\n</script>\n"
        warnings = self._validate(content, "src/routes/+page.svelte")
        assert _reasons(warnings) == ["$env/static/private variables cannot be used in client-side code"]

    def test_static_private_public_prefix(self):
        content = "import { PUBLIC_URL } from '$env/static/private';\n"
        warnings = self._validate(content, "src/routes/+page.server.ts")
        assert _reasons(warnings) == ['$env/static/private variables must not start with "PUBLIC_"']

    def test_static_public_without_prefix(self):
        content = "import { SITE } from '$env/static/public';\n"
        warnings = self._validate(content, "src/routes/+layout.ts")
        assert _reasons(warnings) == ['$env/static/public variables must start with "PUBLIC_"']

    def test_sensitive_public(self):
        content = "import { PUBLIC_API_KEY } from '$env/static/public';\n"
        warnings = self._validate(content, "src/routes/+layout.ts")
        assert _reasons(warnings) == ["Potential sensitive environment variable exposed to the browser"]

    def test_valid_server_import(self):
        content = "import { DB_URL } from '$env/static/private';\n"
        assert self._validate(content, "src/routes/+page.server.ts") == []

    def test_module_on_line_preferred(self, make_usage):
        usage = make_usage(
            "PUBLIC_X",
            pattern=AccessPattern.SVELTEKIT,
            context="import { PUBLIC_X } from '$env/static/public';",
            imports=("$env/static/private", "$env/static/public"),
        )
        ctx = UsageContext(usage=usage, file="src/a.ts")
        assert sveltekit.env_modules(ctx) == ("$env/static/public",)


class TestAngular:
    def setup_method(self):
        self.validator = FrameworkValidator(Framework.ANGULAR)

    def test_process_env_in_component(self, make_usage):
        usage = make_usage("API_URL", file="src/app/home/home.component.ts")
        assert _reasons(self.validator.validate(usage)) == [
            "Avoid using process.env directly in Angular components"
        ]

    def test_client_prefix(self, make_usage):
        usage = make_usage("CLIENT_ID", file="src/environments/env.ts")
        assert _reasons(self.validator.validate(usage)) == [
            "Use NG_APP_ prefix for Angular client-side variables"
        ]

    def test_service_file_ok(self, make_usage):
        assert self.validator.validate(make_usage("API_URL", file="src/app/api.service.ts")) == []


class TestValidator:
    def test_unknown_framework_disabled(self, make_usage):
        validator = FrameworkValidator(Framework.UNKNOWN)
        assert not validator.enabled
        assert validator.validate(make_usage("NEXT_PUBLIC_SECRET", file="app/api/route.ts")) == []

    def test_every_known_framework_has_rules(self):
        assert set(RULE_TABLES) == {Framework.NEXTJS, Framework.SVELTEKIT, Framework.ANGULAR}

    def test_at_most_one_warning_per_usage(self, make_usage):
        usages = [
            make_usage("NEXT_PUBLIC_TOKEN", file="app/api/route.ts", pattern=AccessPattern.IMPORT_META_ENV),
            make_usage("PASSWORD", file="pages/login.tsx", pattern=AccessPattern.IMPORT_META_ENV),
        ]
        warnings = FrameworkValidator(Framework.NEXTJS).validate_all(usages)
        assert len(warnings) == 2


class TestDetection:
    @pytest.mark.parametrize(
        "deps, expected",
        [
            ({"dependencies": {"next": "14.0.0"}}, Framework.NEXTJS),
            ({"devDependencies": {"@sveltejs/kit": "^2.0.0"}}, Framework.SVELTEKIT),
            ({"dependencies": {"@angular/core": "17.0.0"}}, Framework.ANGULAR),
            ({"dependencies": {"express": "4.0.0"}}, Framework.UNKNOWN),
        ],
    )
    def test_detect(self, tmp_path, deps, expected):
        (tmp_path / "package.json").write_text(json.dumps(deps))
        assert detect_framework(tmp_path).framework == expected

    def test_sveltekit_wins_over_next(self, tmp_path):
        data = {"dependencies": {"next": "14", "@sveltejs/kit": "2"}}
        (tmp_path / "package.json").write_text(json.dumps(data))
        detected = detect_framework(tmp_path)
        assert detected.framework == Framework.SVELTEKIT
        assert detected.version == "2"

    def test_missing_package_json(self, tmp_path):
        assert detect_framework(tmp_path).framework == Framework.UNKNOWN

    def test_malformed_package_json(self, tmp_path):
        (tmp_path / "package.json").write_text("{not json")
        assert detect_framework(tmp_path).framework == Framework.UNKNOWN


T3_SCHEMA_FILE = """\
import { createEnv } from "@t3-oss/env-nextjs";
import { z } from "zod";

export const env = createEnv({
  server: {
    DATABASE_URL: z.string().url(),
    NODE_ENV: z.enum(["development", "production"]),
  },
  client: {
    NEXT_PUBLIC_APP_URL: z.string(),
  },
  runtimeEnv: {
    DATABASE_URL: process.env.DATABASE_URL,
  },
});
"""


class TestT3Env:
    schema = T3EnvSchema(server=("DATABASE_URL", "NODE_ENV"), client=("NEXT_PUBLIC_APP_URL",))

    def test_parse_schema(self):
        schema = parse_t3env_schema(T3_SCHEMA_FILE)
        assert schema.server == ("DATABASE_URL", "NODE_ENV")
        assert schema.client == ("NEXT_PUBLIC_APP_URL",)

    def test_parse_without_blocks(self):
        assert parse_t3env_schema("export const env = {};") is None

    def test_detect_in_src(self, write_project):
        root = write_project({"src/env.ts": T3_SCHEMA_FILE})
        schema = detect_t3env(root)
        assert schema.path == "src/env.ts"
        assert "DATABASE_URL" in schema.server

    def test_detect_requires_create_env(self, write_project):
        root = write_project({"env.ts": "export const server = { A: 1 };"})
        assert detect_t3env(root) is None

    def test_public_prefix(self, make_usage):
        warnings = validate_t3env([make_usage("NEXT_PUBLIC_APP_URL", file="app/page.tsx")], self.schema)
        assert _reasons(warnings) == ["Use the t3-env client schema instead of the NEXT_PUBLIC_ prefix"]
        assert warnings[0].framework == Framework.T3ENV

    def test_server_variable_in_client_code(self, make_usage):
        usage = make_usage("DATABASE_URL", file="app/page.tsx", context='"use client"; process.env.DATABASE_URL')
        assert _reasons(validate_t3env([usage], self.schema)) == [
            "Server schema variable used in client code"
        ]

    def test_server_variable_in_server_code(self, make_usage):
        assert validate_t3env([make_usage("DATABASE_URL", file="app/api/route.ts")], self.schema) == []

    def test_not_in_schema_reported_once_per_file(self, make_usage):
        usages = [
            make_usage("STRIPE_KEY", file="lib/pay.ts", line=3),
            make_usage("STRIPE_KEY", file="lib/pay.ts", line=9),
            make_usage("STRIPE_KEY", file="lib/refund.ts"),
        ]
        warnings = validate_t3env(usages, self.schema)
        assert [(w.file, w.line) for w in warnings] == [("lib/pay.ts", 3), ("lib/refund.ts", 1)]
        assert set(_reasons(warnings)) == {"Variable not defined in the t3-env schema"}

    def test_schema_file_exempt(self, make_usage):
        usages = [make_usage("STRIPE_KEY", file="src/env.ts"), make_usage("OTHER", file="env.mjs")]
        assert validate_t3env(usages, self.schema) == []
