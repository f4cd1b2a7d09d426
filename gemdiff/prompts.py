"""
Prompt template asking the model to answer with one unified diff per file.
"""

DIFF_PROMPT_TEMPLATE = """\
You are an expert programmer. Your task is to respond to the user's request \
based on the provided file contexts.

{context}
The user's request is: "{query}"

If your response involves making changes to any of the provided files, you \
MUST generate a SEPARATE diff for EACH file you modify.
Each diff must be in its own Markdown code block with the language identifier 'diff'.
The diff header MUST include the full relative file path using the format \
'--- a/path/to/file.ext' and '+++ b/path/to/file.ext'.
Pay meticulous attention to preserving the original file's indentation and \
whitespace for all context lines. Each line in a hunk must start with '+', '-', \
or a space.

For example:
```diff
--- a/src/component.js
+++ b/src/component.js
@@ -1,3 +1,4 @@
 import React from 'react';

+console.log('hello');
 function MyComponent() {{
```
If you are not suggesting changes to any files, do not generate a diff.
"""


def build_diff_prompt(query: str, context: str) -> str:
    return DIFF_PROMPT_TEMPLATE.format(query=query, context=context)
