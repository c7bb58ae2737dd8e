SQSQueueName = str
SQSMessageID = str

AWSAccountID = str
AWSRegion = str

S3BucketName = str
S3ObjectKey = str

SecretArn = str
