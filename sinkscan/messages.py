"""Message and advice templates for the built-in rules.

Templates are ``str.format`` strings; the placeholders are filled from the
matched node by each rule's ``details()``. ``{code}`` is always available.
"""

MESSAGES = {
    "FASTJSON_DESERIALIZATION": {
        "default": "Fastjson {method}() deserializes untrusted JSON and may lead to remote code execution: {code}",
        "autotype": "Fastjson {method}() is called with AutoType enabled; any class named in the input "
                    "can be instantiated, which is remote code execution in practice: {code}",
    },
    "JAVA_DESERIALIZATION": {
        "default": "{method}() deserializes untrusted data with {owner}; this may lead to remote code execution: {code}",
    },
    "SQL_INJECTION": {
        "default": "SQL statement built by string concatenation with non-constant input: {code}",
        "call": "{method}() receives a query built by string concatenation with non-constant input: {code}",
        "annotation": "MyBatis @{annotation} uses ${{}} substitution, which splices raw input into SQL; "
                      "use #{{}} parameters instead: {code}",
    },
    "COMMAND_INJECTION": {
        "default": "{target} executes a command assembled from non-constant input: {code}",
    },
    "PATH_TRAVERSAL": {
        "default": "{target} opens a path derived from non-constant input ({argument}); "
                   "'../' sequences may escape the intended directory",
    },
    "UNSAFE_URL_CREATION": {
        "default": "new URL() is created from non-constant input ({argument}); this may allow server-side request forgery",
    },
    "RESOURCE_LEAK": {
        "default": "Resource '{variable}' of type {type} is neither declared in try-with-resources "
                   "nor closed in a finally block",
        "close_quietly": "{owner}.closeQuietly() hides failures while releasing resources; "
                         "prefer try-with-resources: {code}",
    },
    "INFORMATION_LEAK": {
        "default": "Exception details from {method}() are returned to the caller and may expose system internals: {code}",
    },
    "INSECURE_RANDOM": {
        "default": "java.util.Random is predictable and unsuitable for security-sensitive values: {code}",
    },
}

DEFAULT_ADVICE = "Review the flagged code against your secure coding guidelines."

ADVICE = {
    "FASTJSON_DESERIALIZATION": (
        "Upgrade to a fastjson release with safeMode enabled or migrate to Jackson/Gson. "
        "Never enable AutoType; if a type must be accepted, register an explicit allow-list "
        "with ParserConfig.getGlobalInstance().addAccept(\"com.yourcompany.\")."
    ),
    "JAVA_DESERIALIZATION": (
        "Avoid deserializing untrusted streams. If unavoidable, install an ObjectInputFilter "
        "(\"com.yourpackage.*;!*\") or override resolveClass() to accept only an allow-list of classes, "
        "or exchange data as JSON instead."
    ),
    "SQL_INJECTION": (
        "Use PreparedStatement with ? placeholders, or the parameter binding of your ORM "
        "(MyBatis #{}); validate identifiers such as column names against an allow-list."
    ),
    "COMMAND_INJECTION": (
        "Pass the command and its arguments as separate array elements, never through a shell, "
        "and validate external values against a strict allow-list (e.g. ^[a-zA-Z0-9._-]+$)."
    ),
    "PATH_TRAVERSAL": (
        "Normalize the path, then verify that it still starts with the allowed base directory; "
        "validate file names against an allow-list."
    ),
    "UNSAFE_URL_CREATION": (
        "Validate URLs against an allow-list of hosts, allow only http/https, "
        "and reject internal addresses and cloud metadata endpoints."
    ),
    "RESOURCE_LEAK": (
        "Declare the resource in a try-with-resources statement so it is closed on every path."
    ),
    "INFORMATION_LEAK": (
        "Log the exception server-side and return a generic message or error code to the client."
    ),
    "INSECURE_RANDOM": (
        "Use java.security.SecureRandom for tokens, passwords, session ids and keys; "
        "UUID.randomUUID() is acceptable for identifiers."
    ),
}
