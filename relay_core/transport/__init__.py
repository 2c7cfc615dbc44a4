"""传输层适配器。核心只依赖 Responder/ReplyHandle 协议，不依赖这里。"""
