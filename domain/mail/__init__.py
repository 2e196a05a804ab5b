"""邮件领域模块

该模块包含邮件转发的领域模型，包括：
- MessageReference、ParsedEmail、OutgoingMail 等值对象
- ForwardResult、PollCycleReport 处理结果
- MailStore、MailSender、MailMessageParser 服务接口
"""
