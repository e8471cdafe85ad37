"""Persona definitions loaded from markdown files with YAML frontmatter."""