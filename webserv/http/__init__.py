"""HTTP methods, status codes, headers, messages, parsers and built-in pages."""